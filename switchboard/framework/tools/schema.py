"""
JSON Schema handling for tool input and output definitions.

Schemas are checked against the draft-04 meta-schema when constructed, so a
broken definition fails at registration rather than at call time. Payload
validation returns a SchemaValidationResult instead of raising, since a
failed validation is an expected outcome of a tool call.
"""

import copy
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft4Validator
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema.validators import validator_for

from switchboard.framework.errors import SchemaDefinitionError


@dataclass(frozen=True)
class SchemaValidationResult:
    """Outcome of validating a payload against a schema.

    Attributes:
        errors: Human-readable validation errors (empty when valid)
        prefix: Label for the message, e.g. "Invalid arguments"
    """

    errors: tuple[str, ...] = ()
    prefix: str = "Invalid data"

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str | None:
        """Combined error message, or None if valid."""
        if self.valid:
            return None
        return f"{self.prefix}: {', '.join(self.errors)}"

    def __bool__(self) -> bool:
        return self.valid


def _format_error(error: JSONSchemaValidationError) -> str:
    if error.json_path == "$":
        return error.message
    return f"{error.json_path}: {error.message}"


def _reject_refs(value: Any) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            if isinstance(key, str) and key.casefold() == "$ref":
                msg = "Invalid JSON Schema: $ref is not allowed in tool schemas"
                raise SchemaDefinitionError(msg)
            _reject_refs(item)
    elif isinstance(value, list):
        for item in value:
            _reject_refs(item)


class Schema:
    """A JSON Schema definition for tool payloads.

    The schema is deep-copied on construction and defaults to
    ``{"type": "object"}``.

    Raises:
        SchemaDefinitionError: If the schema contains ``$ref`` or fails the
            draft-04 meta-schema
    """

    error_prefix = "Invalid data"

    def __init__(self, schema: Mapping[str, Any] | None = None) -> None:
        try:
            data = json.loads(json.dumps(dict(schema or {})))
        except (TypeError, ValueError) as e:
            msg = f"Invalid JSON Schema: {e}"
            raise SchemaDefinitionError(msg) from e

        _reject_refs(data)
        data.setdefault("type", "object")

        errors = sorted(
            Draft4Validator(Draft4Validator.META_SCHEMA).iter_errors(data),
            key=lambda error: error.json_path,
        )
        if errors:
            msg = f"Invalid JSON Schema: {', '.join(_format_error(e) for e in errors)}"
            raise SchemaDefinitionError(msg)

        self._schema = data
        self._validator = validator_for(data, default=Draft4Validator)(data)

    @property
    def schema(self) -> dict[str, Any]:
        return copy.deepcopy(self._schema)

    def to_dict(self) -> dict[str, Any]:
        return self.schema

    def validate(self, data: Any) -> SchemaValidationResult:
        """Validate a payload, collecting every error."""
        errors = sorted(self._validator.iter_errors(data), key=lambda error: error.json_path)
        return SchemaValidationResult(
            errors=tuple(_format_error(e) for e in errors), prefix=self.error_prefix
        )

    def __eq__(self, other: object) -> bool:
        return isinstance(other, type(self)) and self._schema == other._schema

    def __hash__(self) -> int:
        return hash(json.dumps(self._schema, sort_keys=True))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._schema!r})"


class InputSchema(Schema):
    """Schema for tool call arguments."""

    error_prefix = "Invalid arguments"

    def missing_required_arguments(self, arguments: Mapping[str, Any]) -> list[str]:
        """Return required argument names absent from ``arguments``, in schema order."""
        required = self._schema.get("required")
        if not isinstance(required, list):
            return []
        provided = {str(key) for key in arguments}
        return [name for name in required if name not in provided]

    def validate_arguments(self, arguments: Mapping[str, Any]) -> SchemaValidationResult:
        return self.validate(arguments)


class OutputSchema(Schema):
    """Schema for structured tool results."""

    error_prefix = "Invalid result"

    def validate_result(self, result: Any) -> SchemaValidationResult:
        return self.validate(result)


__all__ = ["InputSchema", "OutputSchema", "Schema", "SchemaValidationResult"]
