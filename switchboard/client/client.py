"""MCP client.

The client speaks JSON-RPC through any transport object that has a
``send_request(request: dict) -> dict`` method, e.g. HTTPClientTransport.

Example:
    with HTTPClientTransport("http://localhost:8000/mcp") as transport:
        client = Client(transport)
        tool = client.tools()[0]
        response = client.call_tool(tool, {"a": 1, "b": 2})
        print(response["result"]["content"])
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Protocol

from switchboard.core.jsonrpc import VERSION
from switchboard.core.methods import Methods

logger = logging.getLogger(__name__)


class ClientTransport(Protocol):
    def send_request(self, request: dict[str, Any]) -> dict[str, Any]: ...


@dataclass(frozen=True)
class ClientTool:
    """A tool as advertised by a server."""

    name: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None
    output_schema: dict[str, Any] | None = None


class Client:
    """Issues MCP requests. Results are never cached."""

    def __init__(self, transport: ClientTransport) -> None:
        self.transport = transport

    def tools(self) -> list[ClientTool]:
        result = self._result(self._request(Methods.TOOLS_LIST))
        return [
            ClientTool(
                name=tool["name"],
                description=tool.get("description"),
                input_schema=tool.get("inputSchema"),
                output_schema=tool.get("outputSchema"),
            )
            for tool in result.get("tools") or []
        ]

    def resources(self) -> list[dict[str, Any]]:
        return self._result(self._request(Methods.RESOURCES_LIST)).get("resources") or []

    def resource_templates(self) -> list[dict[str, Any]]:
        result = self._result(self._request(Methods.RESOURCES_TEMPLATES_LIST))
        return result.get("resourceTemplates") or []

    def prompts(self) -> list[dict[str, Any]]:
        return self._result(self._request(Methods.PROMPTS_LIST)).get("prompts") or []

    def call_tool(
        self, tool: ClientTool | str, arguments: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Call a tool and return the full JSON-RPC response."""
        name = tool.name if isinstance(tool, ClientTool) else tool
        return self._request(Methods.TOOLS_CALL, {"name": name, "arguments": arguments})

    def read_resource(self, uri: str) -> list[dict[str, Any]]:
        result = self._result(self._request(Methods.RESOURCES_READ, {"uri": uri}))
        return result.get("contents") or []

    def get_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {"name": name}
        if arguments is not None:
            params["arguments"] = arguments
        return self._result(self._request(Methods.PROMPTS_GET, params))

    def _request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        request: dict[str, Any] = {"jsonrpc": VERSION, "id": str(uuid.uuid4()), "method": method}
        if params is not None:
            request["params"] = params
        return self.transport.send_request(request)

    @staticmethod
    def _result(response: dict[str, Any]) -> dict[str, Any]:
        if "error" in response:
            logger.warning("Server returned error: %s", response["error"])
        return response.get("result") or {}


__all__ = ["Client", "ClientTool", "ClientTransport"]
