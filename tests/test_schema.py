"""
Tests for tool input and output schemas.

Tests verify:
- Construction-time meta-schema validation
- $ref rejection
- Payload validation messages
- Missing required argument detection
"""

import pytest

from switchboard.framework.errors import SchemaDefinitionError
from switchboard.framework.tools.schema import (
    InputSchema,
    OutputSchema,
    Schema,
    SchemaValidationResult,
)

NUMBERS = {
    "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
    "required": ["a", "b"],
}


class TestSchemaConstruction:
    """Test schema definition checks."""

    def test_defaults_to_object(self) -> None:
        """Test an empty schema becomes an object schema."""
        assert InputSchema().to_dict() == {"type": "object"}

    def test_keeps_explicit_type(self) -> None:
        """Test an explicit type is not overwritten."""
        assert OutputSchema({"type": "array"}).to_dict() == {"type": "array"}

    def test_input_is_copied(self) -> None:
        """Test later mutation of the source does not leak in."""
        source = {"properties": {"a": {"type": "number"}}}
        schema = InputSchema(source)

        source["properties"]["b"] = {"type": "string"}

        assert "b" not in schema.to_dict()["properties"]

    def test_to_dict_returns_copy(self) -> None:
        """Test callers cannot mutate the stored schema."""
        schema = InputSchema(NUMBERS)

        schema.to_dict()["required"].append("c")

        assert schema.to_dict()["required"] == ["a", "b"]

    def test_rejects_ref(self) -> None:
        """Test $ref anywhere in the schema is rejected."""
        with pytest.raises(SchemaDefinitionError, match=r"\$ref is not allowed"):
            InputSchema({"properties": {"a": {"$ref": "#/definitions/a"}}})

    def test_rejects_invalid_schema(self) -> None:
        """Test meta-schema violations are reported."""
        with pytest.raises(SchemaDefinitionError, match="Invalid JSON Schema"):
            InputSchema({"properties": {"a": {"type": "bogus"}}})

    def test_schema_definition_error_is_value_error(self) -> None:
        """Test SchemaDefinitionError can be caught as ValueError."""
        with pytest.raises(ValueError):
            Schema({"type": 12})

    def test_equality(self) -> None:
        """Test schemas compare by content."""
        assert InputSchema(NUMBERS) == InputSchema(NUMBERS)
        assert InputSchema(NUMBERS) != OutputSchema(NUMBERS)
        assert hash(InputSchema(NUMBERS)) == hash(InputSchema(NUMBERS))


class TestValidation:
    """Test payload validation."""

    def test_valid_payload(self) -> None:
        """Test a matching payload."""
        result = InputSchema(NUMBERS).validate_arguments({"a": 1, "b": 2.5})

        assert result.valid
        assert result
        assert result.message is None

    def test_type_error_message(self) -> None:
        """Test errors carry the JSON path and prefix."""
        result = InputSchema(NUMBERS).validate_arguments({"a": "one", "b": 2})

        assert not result.valid
        assert result.message == "Invalid arguments: $.a: 'one' is not of type 'number'"

    def test_root_error_has_no_path(self) -> None:
        """Test errors at the root are reported without a path."""
        result = InputSchema(NUMBERS).validate_arguments({"a": 1})

        assert result.errors == ("'b' is a required property",)

    def test_collects_all_errors(self) -> None:
        """Test every error is reported."""
        result = InputSchema(NUMBERS).validate_arguments({"a": "x", "b": "y"})

        assert len(result.errors) == 2

    def test_output_prefix(self) -> None:
        """Test output schemas label errors as results."""
        schema = OutputSchema({"properties": {"total": {"type": "integer"}}})

        result = schema.validate_result({"total": "many"})

        assert result.message.startswith("Invalid result: ")

    def test_result_message_format(self) -> None:
        """Test the combined message joins errors."""
        result = SchemaValidationResult(errors=("first", "second"), prefix="Invalid data")

        assert result.message == "Invalid data: first, second"


class TestMissingRequiredArguments:
    """Test required argument detection."""

    def test_reports_missing_in_schema_order(self) -> None:
        """Test missing names follow the schema's required list."""
        assert InputSchema(NUMBERS).missing_required_arguments({}) == ["a", "b"]
        assert InputSchema(NUMBERS).missing_required_arguments({"b": 1}) == ["a"]

    def test_nothing_required(self) -> None:
        """Test a schema without required properties."""
        assert InputSchema().missing_required_arguments({}) == []
