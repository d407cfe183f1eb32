#!/usr/bin/env python3
"""Example MCP server exposing calculator tools, a prompt and a resource.

Usage:
    # stdio (for desktop MCP clients)
    switchboard serve --app examples.calculator_server:server

    # streamable HTTP
    switchboard serve --app examples.calculator_server:server --transport http --port 8000

    # or run this file directly (stdio)
    python examples/calculator_server.py
"""

import logging
from typing import Any

from switchboard import (
    PromptArgument,
    PromptMessage,
    PromptResult,
    Resource,
    Server,
    StdioTransport,
    TextContent,
    TextResourceContents,
    ToolResponse,
    prompt,
    tool,
)

NUMBER_PAIR_SCHEMA = {
    "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
    "required": ["a", "b"],
}

README_URI = "calculator://readme"
README_TEXT = "Tools: add, divide. Both take two numbers, a and b."


@tool(
    title="Add",
    description="Add two numbers",
    input_schema=NUMBER_PAIR_SCHEMA,
    annotations={"read_only_hint": True, "destructive_hint": False, "idempotent_hint": True},
)
def add(a: float, b: float) -> ToolResponse:
    return ToolResponse([TextContent(str(a + b))], structured_content={"result": a + b})


@tool(
    title="Divide",
    description="Divide a by b",
    input_schema=NUMBER_PAIR_SCHEMA,
    output_schema={"properties": {"result": {"type": "number"}}, "required": ["result"]},
)
def divide(a: float, b: float, server_context: Any = None) -> ToolResponse:
    if b == 0:
        return ToolResponse.error("Cannot divide by zero")
    return ToolResponse([TextContent(str(a / b))], structured_content={"result": a / b})


@prompt(
    title="Explain calculation",
    description="Ask the model to explain a calculation step by step",
    arguments=[PromptArgument(name="expression", description="e.g. 2 + 2", required=True)],
)
def explain_calculation(arguments: dict[str, Any]) -> PromptResult:
    return PromptResult(
        description="Explain a calculation",
        messages=[
            PromptMessage(
                role="user",
                content=TextContent(
                    f"Explain step by step how to compute {arguments['expression']}"
                ),
            )
        ],
    )


server = Server(
    name="calculator",
    version="1.0.0",
    title="Calculator",
    instructions="Use the add and divide tools for arithmetic.",
    tools=[add, divide],
    prompts=[explain_calculation],
    resources=[
        Resource(uri=README_URI, name="readme", title="Readme", mime_type="text/plain"),
    ],
)


@server.resources_read_handler
def read_resource(params: dict[str, Any]) -> list[dict[str, Any]]:
    if params.get("uri") != README_URI:
        return []
    contents = TextResourceContents(uri=README_URI, text=README_TEXT, mime_type="text/plain")
    return [contents.to_dict()]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    StdioTransport(server).open()
