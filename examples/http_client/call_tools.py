#!/usr/bin/env python3
"""Example script for calling MCP tools over streamable HTTP.

This demonstrates how to use the switchboard client to list and call tools
on a running server.

Usage:
    python call_tools.py

Note:
    Make sure the HTTP server is running:
    switchboard serve --app examples.calculator_server:server --transport http --port 8000
"""

import sys
from typing import Any

from switchboard import Client, HTTPClientTransport, RequestHandlerError

# API configuration
MCP_URL = "http://localhost:8000/mcp"
API_TIMEOUT = 60  # seconds


def initialize(transport: HTTPClientTransport) -> dict[str, Any]:
    """Open a session.

    Returns:
        The initialize result (protocol version, capabilities, serverInfo)
    """
    response = transport.send_request(
        {
            "jsonrpc": "2.0",
            "id": "init",
            "method": "initialize",
            "params": {
                "protocolVersion": "2025-06-18",
                "capabilities": {},
                "clientInfo": {"name": "call_tools_example", "version": "1.0.0"},
            },
        }
    )
    return response.get("result") or {}


def main() -> int:
    with HTTPClientTransport(MCP_URL, timeout=API_TIMEOUT) as transport:
        try:
            info = initialize(transport)
        except RequestHandlerError as e:
            print(f"Could not reach server: {e}", file=sys.stderr)
            return 1

        print(f"Connected to {info['serverInfo']['name']} (session {transport.session_id})")

        client = Client(transport)
        for tool in client.tools():
            print(f"- {tool.name}: {tool.description}")

        response = client.call_tool("add", {"a": 2, "b": 3})
        print(response["result"]["content"][0]["text"])

        response = client.call_tool("divide", {"a": 1, "b": 0})
        if response["result"]["isError"]:
            print(f"divide failed: {response['result']['content'][0]['text']}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
