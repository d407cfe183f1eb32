"""JSON-RPC 2.0 envelope validation and dispatch.

The dispatcher is transport-agnostic: it takes an already-decoded request
(single envelope or batch) plus a method resolver, and returns the response
structure to send back, or ``None`` when nothing should be sent.

Usage:
    def resolve(method_name):
        return handlers.get(method_name)

    response = handle({"jsonrpc": "2.0", "id": 1, "method": "ping"}, resolve)
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from switchboard.framework.errors import ErrorCode, ErrorDetails, RequestHandlerError

logger = logging.getLogger(__name__)

VERSION = "2.0"

DEFAULT_ID_PATTERN = re.compile(r"\A[a-zA-Z0-9_-]+\Z")

MethodHandler = Callable[[Any], Any]
MethodResolver = Callable[[str], MethodHandler | None]

# Placeholder for an envelope whose id cannot be trusted; rendered as null.
_UNKNOWN_ID = object()


def handle(
    request: Any,
    method_resolver: MethodResolver,
    id_pattern: re.Pattern[str] | None = DEFAULT_ID_PATTERN,
) -> dict[str, Any] | list[dict[str, Any]] | None:
    """Validate and dispatch a decoded JSON-RPC request or batch.

    Args:
        request: Decoded envelope (dict) or batch (list)
        method_resolver: Maps a method name to a handler, or None if unknown
        id_pattern: Pattern string ids must match (None accepts any string)

    Returns:
        A response dict, a list of response dicts for batches, or None when
        there is nothing to send (notifications only)
    """
    if isinstance(request, list):
        if not request:
            return _error_response(
                _UNKNOWN_ID, id_pattern, ErrorCode.INVALID_REQUEST, "Request is an empty array"
            )

        responses = [_process_request(item, method_resolver, id_pattern) for item in request]
        responses = [response for response in responses if response is not None]

        if len(responses) == 1:
            return responses[0]
        return responses or None

    if isinstance(request, dict):
        return _process_request(request, method_resolver, id_pattern)

    return _error_response(
        _UNKNOWN_ID, id_pattern, ErrorCode.INVALID_REQUEST, "Request must be an array or a hash"
    )


def handle_json(
    request_json: str | bytes,
    method_resolver: MethodResolver,
    id_pattern: re.Pattern[str] | None = DEFAULT_ID_PATTERN,
) -> str | None:
    """Decode, dispatch and encode a JSON-RPC payload.

    Returns:
        Serialized response, or None when there is nothing to send
    """
    try:
        request = json.loads(request_json)
    except (json.JSONDecodeError, UnicodeDecodeError):
        response = _error_response(_UNKNOWN_ID, id_pattern, ErrorCode.PARSE_ERROR, "Invalid JSON")
    else:
        response = handle(request, method_resolver, id_pattern)

    if response is None:
        return None
    return json.dumps(response, separators=(",", ":"))


def valid_id(request_id: Any, id_pattern: re.Pattern[str] | None = DEFAULT_ID_PATTERN) -> bool:
    """Check whether a request id is null, an integer, or an allowed string."""
    if request_id is None:
        return True
    if isinstance(request_id, int) and not isinstance(request_id, bool):
        return True
    if not isinstance(request_id, str):
        return False
    return id_pattern is None or id_pattern.match(request_id) is not None


def _process_request(
    request: Any, method_resolver: MethodResolver, id_pattern: re.Pattern[str] | None
) -> dict[str, Any] | None:
    if not isinstance(request, dict):
        return _error_response(
            _UNKNOWN_ID, id_pattern, ErrorCode.INVALID_REQUEST, "Request must be a hash"
        )

    request_id = request.get("id")

    error = None
    if request.get("jsonrpc") != VERSION:
        error = "JSON-RPC version must be 2.0"
    elif not valid_id(request_id, id_pattern):
        error = "Request ID must match validation pattern, or be an integer or null"
    elif not _valid_method_name(request.get("method")):
        error = 'Method name must be a string and not start with "rpc."'

    if error:
        return _error_response(_UNKNOWN_ID, id_pattern, ErrorCode.INVALID_REQUEST, error)

    method_name = request["method"]
    params = request.get("params")

    if not (params is None or isinstance(params, list | dict)):
        return _error_response(
            request_id,
            id_pattern,
            ErrorCode.INVALID_PARAMS,
            "Method parameters must be an array or an object or null",
        )

    try:
        method = method_resolver(method_name)
        if method is None:
            return _error_response(request_id, id_pattern, ErrorCode.METHOD_NOT_FOUND, method_name)

        result = method(params)
    except RequestHandlerError as e:
        return _error_response(request_id, id_pattern, e.code, e.message)
    except Exception as e:
        logger.debug("Unhandled error in %s handler: %s", method_name, e)
        return _error_response(request_id, id_pattern, ErrorCode.INTERNAL_ERROR, str(e))

    return _success_response(request_id, result)


def _valid_method_name(method: Any) -> bool:
    return isinstance(method, str) and method != "" and not method.startswith("rpc.")


def _success_response(request_id: Any, result: Any) -> dict[str, Any] | None:
    if request_id is None:
        return None
    return {"jsonrpc": VERSION, "id": request_id, "result": result}


def _error_response(
    request_id: Any, id_pattern: re.Pattern[str] | None, code: ErrorCode, data: Any
) -> dict[str, Any] | None:
    # Notifications never get a response, not even an error
    if request_id is None:
        return None
    return {
        "jsonrpc": VERSION,
        "id": request_id if valid_id(request_id, id_pattern) else None,
        "error": ErrorDetails.from_code(code, data=data).to_dict(),
    }


__all__ = [
    "DEFAULT_ID_PATTERN",
    "VERSION",
    "MethodHandler",
    "MethodResolver",
    "handle",
    "handle_json",
    "valid_id",
]
