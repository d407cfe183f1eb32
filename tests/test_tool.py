"""
Tests for tool definitions.

Tests verify:
- Name derivation and validation
- Schema and annotation coercion
- Invocation with and without server context
- Wire serialization
"""

from typing import Any

import pytest

from switchboard.framework.content import Icon, TextContent
from switchboard.framework.errors import SchemaDefinitionError
from switchboard.framework.tools import (
    InputSchema,
    OutputSchema,
    Tool,
    ToolAnnotations,
    ToolResponse,
    tool,
    validate_tool_name,
)
from switchboard.framework.utils import handle_from_name, underscore


class TestToolNames:
    """Test tool name rules."""

    def test_name_from_function(self) -> None:
        """Test the handler's name is used when none is given."""

        def lookup_weather(**kwargs: Any) -> str:
            return "sunny"

        assert Tool.define(lookup_weather).name == "lookup_weather"

    def test_name_from_camel_case_callable(self) -> None:
        """Test class-based handlers get a snake_case name."""

        class FetchHTTPPage:
            def __call__(self, url: str) -> str:
                return url

        assert Tool.define(FetchHTTPPage()).name == "fetch_http_page"

    def test_lambda_requires_name(self) -> None:
        """Test anonymous handlers must be named explicitly."""
        with pytest.raises(ValueError, match="Tool name is required"):
            Tool.define(lambda: None)

    def test_explicit_name_wins(self) -> None:
        """Test an explicit name overrides derivation."""
        assert Tool.define(lambda: None, name="noop").name == "noop"

    @pytest.mark.parametrize("name", ["a", "get.weather", "Get-Weather_2", "x" * 128])
    def test_valid_names(self, name: str) -> None:
        """Test accepted names."""
        validate_tool_name(name)

    @pytest.mark.parametrize("name", ["", "x" * 129])
    def test_invalid_length(self, name: str) -> None:
        """Test the length limits."""
        with pytest.raises(ValueError, match="between 1 and 128 characters"):
            validate_tool_name(name)

    @pytest.mark.parametrize("name", ["has space", "slash/name", "émoji"])
    def test_invalid_characters(self, name: str) -> None:
        """Test disallowed characters."""
        with pytest.raises(ValueError, match="only allowed characters"):
            Tool.define(lambda: None, name=name)

    def test_underscore(self) -> None:
        """Test CamelCase conversion."""
        assert underscore("AddNumbers") == "add_numbers"
        assert underscore("HTTPRequestTool") == "http_request_tool"
        assert handle_from_name("tools.GetWeather") == "get_weather"


class TestToolDefinition:
    """Test Tool.define coercion and serialization."""

    def test_schemas_are_coerced(self) -> None:
        """Test mapping schemas become schema objects."""
        defined = Tool.define(
            lambda: None,
            name="t",
            input_schema={"properties": {"q": {"type": "string"}}},
            output_schema={"properties": {"r": {"type": "string"}}},
        )

        assert isinstance(defined.input_schema, InputSchema)
        assert isinstance(defined.output_schema, OutputSchema)

    def test_invalid_schema_fails_at_definition(self) -> None:
        """Test a broken schema is rejected when the tool is defined."""
        with pytest.raises(SchemaDefinitionError):
            Tool.define(lambda: None, name="t", input_schema={"type": "nope"})

    def test_annotations_from_mapping(self) -> None:
        """Test annotation mappings are converted."""
        defined = Tool.define(lambda: None, name="t", annotations={"read_only_hint": True})

        assert defined.annotations == ToolAnnotations(read_only_hint=True)

    def test_minimal_to_dict(self) -> None:
        """Test only set fields are serialized."""
        assert Tool.define(lambda: None, name="t").to_dict() == {
            "name": "t",
            "inputSchema": {"type": "object"},
        }

    def test_full_to_dict(self) -> None:
        """Test every field uses its wire name."""
        defined = Tool.define(
            lambda: None,
            name="t",
            title="T",
            description="does t",
            icons=[Icon(src="https://example.com/t.png", mime_type="image/png")],
            output_schema={"properties": {"r": {"type": "string"}}},
            annotations=ToolAnnotations(title="T hint", read_only_hint=True),
            meta={"owner": "tests"},
        )

        assert defined.to_dict() == {
            "name": "t",
            "title": "T",
            "description": "does t",
            "icons": [{"mimeType": "image/png", "src": "https://example.com/t.png"}],
            "inputSchema": {"type": "object"},
            "outputSchema": {"type": "object", "properties": {"r": {"type": "string"}}},
            "annotations": {
                "destructiveHint": True,
                "idempotentHint": False,
                "openWorldHint": True,
                "readOnlyHint": True,
                "title": "T hint",
            },
            "_meta": {"owner": "tests"},
        }

    def test_tools_are_immutable(self) -> None:
        """Test definitions cannot be modified after creation."""
        defined = Tool.define(lambda: None, name="t")

        with pytest.raises(AttributeError):
            defined.name = "other"  # type: ignore[misc]


class TestToolInvocation:
    """Test calling tool handlers."""

    def test_call_passes_keyword_arguments(self) -> None:
        """Test arguments become keyword arguments."""

        def greet(name: str) -> str:
            return f"hi {name}"

        assert Tool.define(greet).call({"name": "ada"}) == "hi ada"

    def test_call_passes_server_context(self) -> None:
        """Test handlers that accept server_context receive it."""

        def whoami(server_context: Any) -> Any:
            return server_context

        assert Tool.define(whoami).call({}, server_context={"user": "ada"}) == {"user": "ada"}

    def test_call_omits_server_context(self) -> None:
        """Test handlers without server_context are not given one."""

        def ping() -> str:
            return "pong"

        assert Tool.define(ping).call({}, server_context="ignored") == "pong"

    def test_var_keyword_receives_server_context(self) -> None:
        """Test **kwargs handlers receive server_context."""

        def collect(**kwargs: Any) -> dict[str, Any]:
            return kwargs

        assert Tool.define(collect).call({"a": 1}, server_context="ctx") == {
            "a": 1,
            "server_context": "ctx",
        }

    def test_decorator_forms(self) -> None:
        """Test bare and configured decorator use."""

        @tool
        def bare() -> str:
            return "bare"

        @tool(name="configured", description="with options")
        def other() -> str:
            return "other"

        assert isinstance(bare, Tool)
        assert bare.name == "bare"
        assert other.name == "configured"
        assert other.description == "with options"
        assert bare() == "bare"

    def test_undefined_handler_raises(self) -> None:
        """Test a tool without a handler fails when called."""
        with pytest.raises(NotImplementedError):
            Tool.define(name="placeholder").call({})


class TestToolResponse:
    """Test tool response serialization."""

    def test_to_dict(self) -> None:
        """Test content blocks are serialized and isError is always present."""
        response = ToolResponse([TextContent("ok")])

        assert response.to_dict() == {"content": [{"type": "text", "text": "ok"}], "isError": False}

    def test_structured_content(self) -> None:
        """Test structured content is included when set."""
        response = ToolResponse([{"type": "text", "text": "3"}], structured_content={"sum": 3})

        assert response.to_dict()["structuredContent"] == {"sum": 3}

    def test_error(self) -> None:
        """Test the error helper."""
        assert ToolResponse.error("nope").to_dict() == {
            "content": [{"type": "text", "text": "nope"}],
            "isError": True,
        }
