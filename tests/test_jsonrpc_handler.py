"""
Tests for the JSON-RPC dispatcher.

Tests verify:
- Envelope validation errors and their codes
- Notifications never produce a response
- Batch handling
- Handler error mapping
"""

import json
import re
from typing import Any

import pytest

from switchboard.core import jsonrpc
from switchboard.framework.errors import ErrorType, RequestHandlerError


def echo(params: Any) -> Any:
    return params


def fail(params: Any) -> Any:
    raise ValueError("boom")


def reject(params: Any) -> Any:
    raise RequestHandlerError("bad input", params, error_type=ErrorType.INVALID_PARAMS)


HANDLERS = {"echo": echo, "fail": fail, "reject": reject}


def resolve(method: str) -> Any:
    return HANDLERS.get(method)


class TestSingleRequests:
    """Test single envelope dispatch."""

    def test_success_response(self) -> None:
        """Test a valid request returns the handler result."""
        response = jsonrpc.handle(
            {"jsonrpc": "2.0", "id": 1, "method": "echo", "params": {"x": 1}}, resolve
        )

        assert response == {"jsonrpc": "2.0", "id": 1, "result": {"x": 1}}

    def test_notification_has_no_response(self) -> None:
        """Test a request without id gets no response."""
        assert jsonrpc.handle({"jsonrpc": "2.0", "method": "echo"}, resolve) is None

    def test_notification_error_has_no_response(self) -> None:
        """Test a failing notification still gets no response."""
        assert jsonrpc.handle({"jsonrpc": "2.0", "method": "missing"}, resolve) is None

    def test_wrong_version(self) -> None:
        """Test a wrong jsonrpc version is an invalid request with null id."""
        response = jsonrpc.handle({"jsonrpc": "1.0", "id": 1, "method": "echo"}, resolve)

        assert response["id"] is None
        assert response["error"] == {
            "code": -32600,
            "message": "Invalid Request",
            "data": "JSON-RPC version must be 2.0",
        }

    def test_invalid_id(self) -> None:
        """Test an id failing the pattern is rejected and rendered as null."""
        response = jsonrpc.handle({"jsonrpc": "2.0", "id": "bad id!", "method": "echo"}, resolve)

        assert response["id"] is None
        assert response["error"]["code"] == -32600
        assert "Request ID must match validation pattern" in response["error"]["data"]

    def test_bool_id_is_invalid(self) -> None:
        """Test a boolean id is not accepted as an integer."""
        response = jsonrpc.handle({"jsonrpc": "2.0", "id": True, "method": "echo"}, resolve)

        assert response["error"]["code"] == -32600

    @pytest.mark.parametrize("method", [None, 42, "", "rpc.discover"])
    def test_invalid_method_name(self, method: Any) -> None:
        """Test non-string, empty and reserved method names are rejected."""
        response = jsonrpc.handle({"jsonrpc": "2.0", "id": 1, "method": method}, resolve)

        assert response["error"]["code"] == -32600
        assert response["error"]["data"] == 'Method name must be a string and not start with "rpc."'

    def test_invalid_params_type(self) -> None:
        """Test scalar params are rejected with the request id kept."""
        response = jsonrpc.handle(
            {"jsonrpc": "2.0", "id": 7, "method": "echo", "params": "scalar"}, resolve
        )

        assert response["id"] == 7
        assert response["error"]["code"] == -32602
        assert response["error"]["message"] == "Invalid params"

    def test_list_params_allowed(self) -> None:
        """Test positional params reach the handler."""
        response = jsonrpc.handle(
            {"jsonrpc": "2.0", "id": 1, "method": "echo", "params": [1, 2]}, resolve
        )

        assert response["result"] == [1, 2]

    def test_method_not_found(self) -> None:
        """Test an unknown method reports its name."""
        response = jsonrpc.handle({"jsonrpc": "2.0", "id": 1, "method": "missing"}, resolve)

        assert response["error"] == {
            "code": -32601,
            "message": "Method not found",
            "data": "missing",
        }

    def test_handler_error_uses_error_code(self) -> None:
        """Test a RequestHandlerError maps to its error type's code."""
        response = jsonrpc.handle({"jsonrpc": "2.0", "id": 1, "method": "reject"}, resolve)

        assert response["error"] == {
            "code": -32602,
            "message": "Invalid params",
            "data": "bad input",
        }

    def test_unexpected_error_is_internal(self) -> None:
        """Test other exceptions become internal errors."""
        response = jsonrpc.handle({"jsonrpc": "2.0", "id": 1, "method": "fail"}, resolve)

        assert response["error"] == {"code": -32603, "message": "Internal error", "data": "boom"}

    def test_resolver_error_is_internal(self) -> None:
        """Test an exception raised while resolving becomes an internal error."""

        def broken_resolver(method: str) -> Any:
            raise RuntimeError("not allowed")

        response = jsonrpc.handle({"jsonrpc": "2.0", "id": 1, "method": "echo"}, broken_resolver)

        assert response["error"]["code"] == -32603
        assert response["error"]["data"] == "not allowed"

    def test_non_object_request(self) -> None:
        """Test a scalar request is rejected."""
        response = jsonrpc.handle("hello", resolve)

        assert response["id"] is None
        assert response["error"]["data"] == "Request must be an array or a hash"

    def test_custom_id_pattern(self) -> None:
        """Test a custom id pattern."""
        pattern = re.compile(r"\Areq-\d+\Z")

        ok = jsonrpc.handle({"jsonrpc": "2.0", "id": "req-1", "method": "echo"}, resolve, pattern)
        bad = jsonrpc.handle({"jsonrpc": "2.0", "id": "abc", "method": "echo"}, resolve, pattern)

        assert ok["result"] is None
        assert bad["error"]["code"] == -32600


class TestBatches:
    """Test batch dispatch."""

    def test_empty_batch(self) -> None:
        """Test an empty batch is an invalid request."""
        response = jsonrpc.handle([], resolve)

        assert response["id"] is None
        assert response["error"]["data"] == "Request is an empty array"

    def test_batch_responses_in_order(self) -> None:
        """Test each request in a batch gets a response."""
        response = jsonrpc.handle(
            [
                {"jsonrpc": "2.0", "id": 1, "method": "echo", "params": {"n": 1}},
                {"jsonrpc": "2.0", "id": 2, "method": "missing"},
            ],
            resolve,
        )

        assert [r["id"] for r in response] == [1, 2]
        assert response[0]["result"] == {"n": 1}
        assert response[1]["error"]["code"] == -32601

    def test_batch_notifications_are_dropped(self) -> None:
        """Test notifications in a batch produce no entries."""
        response = jsonrpc.handle(
            [{"jsonrpc": "2.0", "method": "echo"}, {"jsonrpc": "2.0", "method": "echo"}], resolve
        )

        assert response is None

    def test_single_response_is_unwrapped(self) -> None:
        """Test a batch with one response returns that response."""
        response = jsonrpc.handle(
            [{"jsonrpc": "2.0", "method": "echo"}, {"jsonrpc": "2.0", "id": 3, "method": "echo"}],
            resolve,
        )

        assert response == {"jsonrpc": "2.0", "id": 3, "result": None}

    def test_non_object_member(self) -> None:
        """Test a scalar batch member is rejected."""
        response = jsonrpc.handle([1, {"jsonrpc": "2.0", "id": 1, "method": "echo"}], resolve)

        assert response[0]["error"]["data"] == "Request must be a hash"
        assert response[1]["result"] is None


class TestHandleJson:
    """Test the serialized entry point."""

    def test_parse_error(self) -> None:
        """Test malformed JSON is a parse error."""
        response = json.loads(jsonrpc.handle_json("{not json", resolve))

        assert response == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32700, "message": "Parse error", "data": "Invalid JSON"},
        }

    def test_round_trip(self) -> None:
        """Test a request is decoded and the response encoded."""
        payload = '{"jsonrpc":"2.0","id":"a","method":"echo","params":[1]}'

        response = jsonrpc.handle_json(payload, resolve)

        assert response == '{"jsonrpc":"2.0","id":"a","result":[1]}'

    def test_notification_returns_none(self) -> None:
        """Test a notification produces no payload."""
        assert jsonrpc.handle_json('{"jsonrpc":"2.0","method":"echo"}', resolve) is None


class TestValidId:
    """Test id validation."""

    @pytest.mark.parametrize("request_id", [None, 0, -5, 123, "abc", "a_b-C9"])
    def test_valid(self, request_id: Any) -> None:
        """Test accepted ids."""
        assert jsonrpc.valid_id(request_id)

    @pytest.mark.parametrize("request_id", [True, 1.5, "", "a b", {"a": 1}, [1]])
    def test_invalid(self, request_id: Any) -> None:
        """Test rejected ids."""
        assert not jsonrpc.valid_id(request_id)

    def test_no_pattern_accepts_any_string(self) -> None:
        """Test disabling the pattern."""
        assert jsonrpc.valid_id("any thing at all", None)
