"""MCP Server Core.

This package contains the server side of the protocol:
- mcp_server.py: Server (handler table, instrumentation, notifications)
- registry.py: Tool/prompt/resource registry
- context.py: Per-request context
- stdio_transport.py: Line-delimited stdio transport
- http_transport.py: Streamable HTTP transport (Starlette/uvicorn)
- config.py: Configuration and deployment settings
"""
