"""MCP client and client transports."""

from .client import Client, ClientTool, ClientTransport
from .http import HTTPClientTransport

__all__ = ["Client", "ClientTool", "ClientTransport", "HTTPClientTransport"]
