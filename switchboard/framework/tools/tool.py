"""
Tool definitions.

A Tool pairs an immutable description (name, schemas, annotations) with the
callable that implements it. Every way of declaring a tool, whether
``Tool.define(...)``, the ``@tool`` decorator or ``Server.define_tool``, goes
through ``Tool.define`` and produces the same frozen object.

Usage:
    @tool(
        description="Add two numbers",
        input_schema={
            "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
            "required": ["a", "b"],
        },
    )
    def add(a: float, b: float) -> ToolResponse:
        return ToolResponse([TextContent(str(a + b))])
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from switchboard.framework.content import Icon, content_to_dict
from switchboard.framework.tools.schema import InputSchema, OutputSchema
from switchboard.framework.utils import (
    accepts_server_context,
    compact,
    handle_from_name,
    icons_to_list,
)

MAX_TOOL_NAME_LENGTH = 128
TOOL_NAME_PATTERN = re.compile(r"\A[A-Za-z\d_\-.]+\Z")


@dataclass(frozen=True)
class ToolAnnotations:
    """Behavioral hints for clients. Defaults match the MCP protocol defaults."""

    title: str | None = None
    read_only_hint: bool = False
    destructive_hint: bool = True
    idempotent_hint: bool = False
    open_world_hint: bool = True

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "destructiveHint": self.destructive_hint,
                "idempotentHint": self.idempotent_hint,
                "openWorldHint": self.open_world_hint,
                "readOnlyHint": self.read_only_hint,
                "title": self.title,
            }
        )


@dataclass(frozen=True)
class ToolResponse:
    """Result of a tool call.

    Attributes:
        content: Content blocks (dataclasses or plain mappings)
        is_error: Whether the call failed at the tool level
        structured_content: Optional structured result, see OutputSchema
    """

    content: list[Any] = field(default_factory=list)
    is_error: bool = False
    structured_content: Any = None

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "content": [content_to_dict(block) for block in self.content],
                "isError": self.is_error,
                "structuredContent": self.structured_content,
            }
        )

    @classmethod
    def error(cls, text: str) -> "ToolResponse":
        """Build a tool-level error response carrying one text block."""
        return cls(content=[{"type": "text", "text": text}], is_error=True)


def validate_tool_name(name: str) -> None:
    """Raise ValueError unless ``name`` is a valid MCP tool name."""
    if not name or len(name) > MAX_TOOL_NAME_LENGTH:
        msg = "Tool names should be between 1 and 128 characters in length (inclusive)."
        raise ValueError(msg)

    if not TOOL_NAME_PATTERN.match(name):
        msg = (
            "Tool names only allowed characters: uppercase and lowercase ASCII letters "
            "(A-Z, a-z), digits (0-9), underscore (_), hyphen (-), and dot (.)."
        )
        raise ValueError(msg)


@dataclass(frozen=True)
class Tool:
    """An immutable tool definition bound to its handler.

    Prefer ``Tool.define`` over calling the constructor directly; it derives
    the name and coerces schemas and annotations.
    """

    name: str
    handler: Callable[..., Any] = field(repr=False, compare=False)
    title: str | None = None
    description: str | None = None
    icons: tuple[Icon, ...] = ()
    input_schema: InputSchema = field(default_factory=InputSchema)
    output_schema: OutputSchema | None = None
    annotations: ToolAnnotations | None = None
    meta: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        validate_tool_name(self.name)

    @classmethod
    def define(
        cls,
        handler: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        title: str | None = None,
        description: str | None = None,
        icons: Iterable[Icon] = (),
        input_schema: InputSchema | Mapping[str, Any] | None = None,
        output_schema: OutputSchema | Mapping[str, Any] | None = None,
        annotations: ToolAnnotations | Mapping[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> "Tool":
        """Build a Tool.

        Args:
            handler: Callable invoked with the call arguments as keyword
                arguments (plus ``server_context`` if it accepts one)
            name: Tool name; derived from the handler's name if omitted
            title: Display title
            description: Human-readable description
            icons: Icons for display
            input_schema: JSON Schema (or InputSchema) for arguments
            output_schema: JSON Schema (or OutputSchema) for structured results
            annotations: ToolAnnotations or a mapping of its fields
            meta: Free-form ``_meta`` payload

        Raises:
            ValueError: If the name is invalid or cannot be derived
            SchemaDefinitionError: If a schema is invalid
        """
        if handler is None:
            handler = _not_implemented

        if name is None:
            name = _derive_name(handler)

        if not isinstance(input_schema, InputSchema):
            input_schema = InputSchema(input_schema)
        if output_schema is not None and not isinstance(output_schema, OutputSchema):
            output_schema = OutputSchema(output_schema)
        if annotations is not None and not isinstance(annotations, ToolAnnotations):
            annotations = ToolAnnotations(**annotations)

        return cls(
            name=name,
            handler=handler,
            title=title,
            description=description,
            icons=tuple(icons),
            input_schema=input_schema,
            output_schema=output_schema,
            annotations=annotations,
            meta=meta,
        )

    def call(self, arguments: Mapping[str, Any], server_context: Any = None) -> Any:
        """Invoke the handler with ``arguments`` as keyword arguments."""
        kwargs = {str(key): value for key, value in arguments.items()}
        if accepts_server_context(self.handler):
            kwargs["server_context"] = server_context
        return self.handler(**kwargs)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.handler(*args, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "name": self.name,
                "title": self.title,
                "description": self.description,
                "icons": icons_to_list(self.icons),
                "inputSchema": self.input_schema.to_dict(),
                "outputSchema": self.output_schema.to_dict() if self.output_schema else None,
                "annotations": self.annotations.to_dict() if self.annotations else None,
                "_meta": self.meta,
            }
        )


def tool(
    handler: Callable[..., Any] | None = None, **options: Any
) -> Tool | Callable[[Callable[..., Any]], Tool]:
    """Decorator form of ``Tool.define``.

    Usable bare (``@tool``) or with options (``@tool(name="echo")``).
    """
    if handler is not None:
        return Tool.define(handler, **options)

    def decorator(func: Callable[..., Any]) -> Tool:
        return Tool.define(func, **options)

    return decorator


def _derive_name(handler: Callable[..., Any]) -> str:
    name = getattr(handler, "__name__", None) or type(handler).__name__
    if name == "<lambda>":
        msg = "Tool name is required when the handler is a lambda"
        raise ValueError(msg)
    return handle_from_name(name)


def _not_implemented(**kwargs: Any) -> Any:
    msg = "Tool handler is not implemented"
    raise NotImplementedError(msg)


__all__ = [
    "MAX_TOOL_NAME_LENGTH",
    "Tool",
    "ToolAnnotations",
    "ToolResponse",
    "tool",
    "validate_tool_name",
]
