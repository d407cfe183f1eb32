"""Tests for the stdio transport."""

import io
import json

from switchboard.server.mcp_server import Server
from switchboard.server.stdio_transport import StdioTransport


def run(server: Server, *lines: str) -> tuple[StdioTransport, list[dict]]:
    output = io.StringIO()
    transport = StdioTransport(server, io.StringIO("".join(lines)), output)
    transport.open()
    return transport, [json.loads(line) for line in output.getvalue().splitlines()]


class TestStdioTransport:
    """Test line-delimited request handling."""

    def test_responds_line_per_request(self, server: Server) -> None:
        """Test each request line gets one response line."""
        _, responses = run(
            server,
            '{"jsonrpc":"2.0","id":1,"method":"ping"}\n',
            '{"jsonrpc":"2.0","id":2,"method":"tools/list"}\n',
        )

        assert [r["id"] for r in responses] == [1, 2]
        assert responses[0]["result"] == {}

    def test_skips_blank_lines_and_notifications(self, server: Server) -> None:
        """Test blank lines and notifications produce no output."""
        _, responses = run(
            server,
            "\n",
            '{"jsonrpc":"2.0","method":"notifications/initialized"}\n',
            '{"jsonrpc":"2.0","id":3,"method":"ping"}\n',
        )

        assert [r["id"] for r in responses] == [3]

    def test_parse_error(self, server: Server) -> None:
        """Test malformed lines get a parse error."""
        _, responses = run(server, "not json\n")

        assert responses[0]["error"]["code"] == -32700

    def test_connection_keeps_client_info(self, server: Server) -> None:
        """Test initialize fills in the connection's context."""
        transport, _ = run(
            server,
            '{"jsonrpc":"2.0","id":1,"method":"initialize",'
            '"params":{"protocolVersion":"2025-06-18","clientInfo":{"name":"desk"}}}\n',
        )

        assert transport.context.client_info == {"name": "desk"}
        assert transport.context.protocol_version == "2025-06-18"

    def test_attaches_to_server(self, server: Server) -> None:
        """Test the server's notifications go out on stdout."""
        output = io.StringIO()
        transport = StdioTransport(server, io.StringIO(""), output)

        server.notify_tools_list_changed()

        assert server.transport is transport
        assert json.loads(output.getvalue()) == {
            "jsonrpc": "2.0",
            "method": "notifications/tools/list_changed",
        }

    def test_send_notification_with_params(self, server: Server) -> None:
        """Test notifications carry their params."""
        output = io.StringIO()
        transport = StdioTransport(server, io.StringIO(""), output)

        assert transport.send_notification("notifications/progress", {"progress": 1})
        assert output.getvalue() == (
            '{"jsonrpc":"2.0","method":"notifications/progress","params":{"progress":1}}\n'
        )
