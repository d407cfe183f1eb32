"""
Error taxonomy for standardized error handling across the MCP server.

Handlers raise these typed exceptions, which the JSON-RPC dispatcher maps to
protocol-level error objects.

Key features:
- Error type enum (avoid typos), each mapped to one JSON-RPC error code
- Pydantic model for structured error details
- Construction-time errors for invalid registrations
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# JSON-RPC Error Codes and Error Types
# ============================================================================


class ErrorCode(int, Enum):
    """JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    @property
    def title(self) -> str:
        """Standard human-readable message for the code."""
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid Request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}


class ErrorType(str, Enum):
    """Enumeration of request handling failure kinds."""

    # Protocol errors
    INVALID_REQUEST = "invalid_request"
    INVALID_PARAMS = "invalid_params"
    PARSE_ERROR = "parse_error"
    INTERNAL_ERROR = "internal_error"

    # Registry errors
    MISSING_REQUIRED_ARGUMENTS = "missing_required_arguments"
    PROMPT_NOT_FOUND = "prompt_not_found"

    # Client transport errors
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    UNPROCESSABLE_ENTITY = "unprocessable_entity"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"

    @property
    def code(self) -> ErrorCode:
        """JSON-RPC code this error type is reported with."""
        return _ERROR_TYPE_CODES.get(self, ErrorCode.INTERNAL_ERROR)


_ERROR_TYPE_CODES = {
    ErrorType.INVALID_REQUEST: ErrorCode.INVALID_REQUEST,
    ErrorType.INVALID_PARAMS: ErrorCode.INVALID_PARAMS,
    ErrorType.PARSE_ERROR: ErrorCode.PARSE_ERROR,
}

# Error types describing bad input rather than a server fault; these are not
# sent to the exception reporter.
EXPECTED_ERROR_TYPES = frozenset(
    {
        ErrorType.INVALID_REQUEST,
        ErrorType.INVALID_PARAMS,
        ErrorType.PARSE_ERROR,
        ErrorType.MISSING_REQUIRED_ARGUMENTS,
        ErrorType.PROMPT_NOT_FOUND,
    }
)


# ============================================================================
# Pydantic Error Models
# ============================================================================


class ErrorDetails(BaseModel):
    """Structured JSON-RPC error object."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: int = Field(..., description="JSON-RPC error code")
    message: str = Field(..., description="Standard message for the code")
    data: Any | None = Field(default=None, description="Additional detail, omitted when null")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, dropping null members."""
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_code(cls, code: ErrorCode, data: Any | None = None) -> "ErrorDetails":
        return cls(code=code.value, message=code.title, data=data)


# ============================================================================
# Base Exception Class
# ============================================================================


class SwitchboardError(Exception):
    """Base class for all switchboard errors."""


# ============================================================================
# Request Handling Errors
# ============================================================================


class RequestHandlerError(SwitchboardError):
    """A request could not be handled.

    Attributes:
        request: The request params (or request object) that failed
        error_type: Failure kind, selects the JSON-RPC error code
        original_error: Underlying exception, if this wraps one
    """

    def __init__(
        self,
        message: str,
        request: Any = None,
        error_type: ErrorType | str = ErrorType.INTERNAL_ERROR,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.request = request
        self.error_type = ErrorType(error_type)
        self.original_error = original_error

    @property
    def code(self) -> ErrorCode:
        return self.error_type.code

    @property
    def expected(self) -> bool:
        """Whether this error describes bad input rather than a server fault."""
        return self.error_type in EXPECTED_ERROR_TYPES

    def to_details(self) -> ErrorDetails:
        """Convert to structured ErrorDetails."""
        return ErrorDetails.from_code(self.code, data=self.message)


class MethodAlreadyDefinedError(SwitchboardError):
    """A custom method collides with an existing handler."""

    def __init__(self, method_name: str) -> None:
        super().__init__(f"Method {method_name} already defined")
        self.method_name = method_name


class MissingRequiredCapabilityError(SwitchboardError):
    """A method was invoked that the server's capabilities do not allow."""

    def __init__(self, method: str, capability: str) -> None:
        super().__init__(f"Server does not support {capability} (required for {method})")
        self.method = method
        self.capability = capability


# ============================================================================
# Construction Errors
# ============================================================================


class ToolNotUniqueError(SwitchboardError):
    """Two or more tools share a name."""

    def __init__(self, duplicated_names: list[str]) -> None:
        super().__init__(
            f"Tool names should be unique. Use `tool_name` to assign unique names to: "
            f"{', '.join(duplicated_names)}"
        )
        self.duplicated_names = duplicated_names


class SchemaDefinitionError(SwitchboardError, ValueError):
    """A tool input or output schema is not a valid JSON Schema."""


class ProtocolVersionError(SwitchboardError, ValueError):
    """A configured protocol version is unsupported, or a definition uses a
    field the configured protocol version does not allow."""


__all__ = [
    "EXPECTED_ERROR_TYPES",
    "ErrorCode",
    "ErrorDetails",
    "ErrorType",
    "MethodAlreadyDefinedError",
    "MissingRequiredCapabilityError",
    "ProtocolVersionError",
    "RequestHandlerError",
    "SchemaDefinitionError",
    "SwitchboardError",
    "ToolNotUniqueError",
]
