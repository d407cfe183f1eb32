"""HTTP client transport (httpx)."""

import logging
from typing import Any

import httpx

from switchboard.framework.errors import ErrorType, RequestHandlerError

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/json, text/event-stream"
SESSION_HEADER = "Mcp-Session-Id"

# HTTP status -> (error type, message template)
_STATUS_ERRORS = {
    400: (ErrorType.BAD_REQUEST, "The {method} request is invalid"),
    401: (ErrorType.UNAUTHORIZED, "You are unauthorized to make {method} requests"),
    403: (ErrorType.FORBIDDEN, "You are forbidden to make {method} requests"),
    404: (ErrorType.NOT_FOUND, "The {method} request is not found"),
    422: (ErrorType.UNPROCESSABLE_ENTITY, "The {method} request is unprocessable"),
}


class HTTPClientTransport:
    """Sends JSON-RPC requests to an MCP server over HTTP POST.

    The session id returned by the server (``Mcp-Session-Id``) is remembered
    and sent with later requests.

    Args:
        url: Server endpoint URL
        headers: Extra headers for every request (e.g. Authorization)
        http_client: httpx.Client to use; one is created if omitted
        timeout: Request timeout in seconds for the created client
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self.headers = dict(headers or {})
        self.session_id: str | None = None
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    def send_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON-RPC request and return the decoded response.

        Raises:
            RequestHandlerError: On HTTP errors or a non-JSON response
        """
        method = request.get("method")
        details = {"method": method, "params": request.get("params")}

        try:
            response = self._client.post(self.url, json=request, headers=self._request_headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_type, template = _STATUS_ERRORS.get(
                e.response.status_code,
                (ErrorType.INTERNAL_ERROR, "Internal error handling {method} request"),
            )
            raise RequestHandlerError(
                template.format(method=method), details, error_type=error_type, original_error=e
            ) from e
        except httpx.HTTPError as e:
            raise RequestHandlerError(
                f"Internal error handling {method} request",
                details,
                error_type=ErrorType.INTERNAL_ERROR,
                original_error=e,
            ) from e

        content_type = response.headers.get("content-type")
        if not content_type or "application/json" not in content_type:
            msg = (
                f"Unsupported Content-Type: {content_type!r}. "
                "This client only supports JSON responses."
            )
            raise RequestHandlerError(msg, details, error_type=ErrorType.UNSUPPORTED_MEDIA_TYPE)

        session_id = response.headers.get(SESSION_HEADER)
        if session_id:
            self.session_id = session_id

        return response.json()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HTTPClientTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request_headers(self) -> dict[str, str]:
        headers = {"Accept": ACCEPT_HEADER, **self.headers}
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id
        return headers


__all__ = ["ACCEPT_HEADER", "HTTPClientTransport"]
