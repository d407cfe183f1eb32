"""
Switchboard: a Model Context Protocol (MCP) server SDK.

Switchboard routes and validates JSON-RPC messages between MCP clients and
the tools, prompts and resources a server registers.

Public API:
- Server, Configuration, configure: building and configuring servers
- Tool, tool, Prompt, prompt, Resource, ResourceTemplate: definitions
- StdioTransport, StreamableHTTPTransport: transports
- Client, HTTPClientTransport: calling MCP servers
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("switchboard-mcp")
except PackageNotFoundError:
    # Development install or not installed via pip
    __version__ = "0.1.0"

from switchboard.client import Client, ClientTool, HTTPClientTransport
from switchboard.core.methods import Methods
from switchboard.framework.content import (
    Annotations,
    BlobResourceContents,
    EmbeddedResource,
    Icon,
    ImageContent,
    TextContent,
    TextResourceContents,
)
from switchboard.framework.errors import (
    MethodAlreadyDefinedError,
    MissingRequiredCapabilityError,
    RequestHandlerError,
    ToolNotUniqueError,
)
from switchboard.framework.prompts import (
    Prompt,
    PromptArgument,
    PromptMessage,
    PromptResult,
    prompt,
)
from switchboard.framework.resources import Resource, ResourceTemplate
from switchboard.framework.tools import (
    InputSchema,
    OutputSchema,
    Tool,
    ToolAnnotations,
    ToolResponse,
    tool,
)
from switchboard.server.config import Configuration, configure, get_configuration
from switchboard.server.context import RequestContext
from switchboard.server.http_transport import StreamableHTTPTransport
from switchboard.server.mcp_server import Server
from switchboard.server.stdio_transport import StdioTransport

__all__ = [
    "Annotations",
    "BlobResourceContents",
    "Client",
    "ClientTool",
    "Configuration",
    "EmbeddedResource",
    "HTTPClientTransport",
    "Icon",
    "ImageContent",
    "InputSchema",
    "MethodAlreadyDefinedError",
    "Methods",
    "MissingRequiredCapabilityError",
    "OutputSchema",
    "Prompt",
    "PromptArgument",
    "PromptMessage",
    "PromptResult",
    "RequestContext",
    "RequestHandlerError",
    "Resource",
    "ResourceTemplate",
    "Server",
    "StdioTransport",
    "StreamableHTTPTransport",
    "TextContent",
    "TextResourceContents",
    "Tool",
    "ToolAnnotations",
    "ToolNotUniqueError",
    "ToolResponse",
    "__version__",
    "configure",
    "get_configuration",
    "prompt",
    "tool",
]
