"""Per-request context threaded from a transport into the server."""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any


@dataclass
class RequestContext:
    """What the server knows about the caller of the current request.

    Transports keep one context per session (HTTP) or per connection
    (stdio); ``initialize`` fills in the client fields.

    Attributes:
        session_id: Transport session id, if any
        client_info: ``clientInfo`` sent with ``initialize``
        protocol_version: Protocol version negotiated at ``initialize``
    """

    session_id: str | None = None
    client_info: dict[str, Any] | None = None
    protocol_version: str | None = None


_current_context: ContextVar[RequestContext | None] = ContextVar(
    "switchboard_request_context", default=None
)


@contextmanager
def request_context(context: RequestContext) -> Iterator[RequestContext]:
    """Make ``context`` current for the duration of a dispatch."""
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)


def current_request_context() -> RequestContext | None:
    """Return the context of the request being handled, if any."""
    return _current_context.get()


__all__ = ["RequestContext", "current_request_context", "request_context"]
