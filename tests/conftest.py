"""Shared fixtures for switchboard tests."""

from collections.abc import Iterator
from typing import Any

import pytest

from switchboard.framework.content import TextContent
from switchboard.framework.prompts import Prompt, PromptMessage, PromptResult
from switchboard.framework.resources import Resource, ResourceTemplate
from switchboard.framework.tools import Tool, ToolResponse
from switchboard.server.config import Configuration, reset_configuration
from switchboard.server.mcp_server import Server


@pytest.fixture(autouse=True)
def clean_configuration() -> Iterator[None]:
    """Reset the process-wide configuration around every test."""
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def reported() -> list[tuple[BaseException, dict[str, Any]]]:
    return []


@pytest.fixture
def instrumented() -> list[dict[str, Any]]:
    return []


@pytest.fixture
def configuration(
    reported: list[tuple[BaseException, dict[str, Any]]], instrumented: list[dict[str, Any]]
) -> Configuration:
    """Configuration recording exceptions and instrumentation data."""
    return Configuration(
        exception_reporter=lambda e, context: reported.append((e, context)),
        instrumentation_callback=lambda data: instrumented.append(dict(data)),
    )


@pytest.fixture
def add_tool() -> Tool:
    def add(a: float, b: float) -> ToolResponse:
        return ToolResponse([TextContent(str(a + b))])

    return Tool.define(
        add,
        description="Add two numbers",
        input_schema={
            "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
            "required": ["a", "b"],
        },
    )


@pytest.fixture
def greeting_prompt() -> Prompt:
    def greeting(arguments: dict[str, Any]) -> PromptResult:
        return PromptResult(
            description="Greeting",
            messages=[PromptMessage("user", TextContent(f"Hello {arguments['name']}"))],
        )

    return Prompt.define(
        greeting,
        description="Greet someone",
        arguments=[{"name": "name", "description": "Who to greet", "required": True}],
    )


@pytest.fixture
def server(add_tool: Tool, greeting_prompt: Prompt, configuration: Configuration) -> Server:
    return Server(
        name="test_server",
        version="1.2.3",
        tools=[add_tool],
        prompts=[greeting_prompt],
        resources=[Resource(uri="file:///readme.md", name="readme", mime_type="text/markdown")],
        resource_templates=[ResourceTemplate(uri_template="file:///{path}", name="files")],
        configuration=configuration,
    )


def request(method: str, params: Any = None, request_id: Any = 1) -> dict[str, Any]:
    """Build a JSON-RPC request envelope."""
    envelope: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if request_id is not None:
        envelope["id"] = request_id
    if params is not None:
        envelope["params"] = params
    return envelope
