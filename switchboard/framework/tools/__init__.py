"""
Tool system - definitions, schemas and responses.
"""

from .schema import InputSchema, OutputSchema, Schema, SchemaValidationResult
from .tool import (
    MAX_TOOL_NAME_LENGTH,
    Tool,
    ToolAnnotations,
    ToolResponse,
    tool,
    validate_tool_name,
)

__all__ = [
    "MAX_TOOL_NAME_LENGTH",
    "InputSchema",
    "OutputSchema",
    "Schema",
    "SchemaValidationResult",
    "Tool",
    "ToolAnnotations",
    "ToolResponse",
    "tool",
    "validate_tool_name",
]
