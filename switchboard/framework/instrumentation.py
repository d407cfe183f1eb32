"""
Per-call instrumentation data.

Each dispatched request gets its own data dict held in a context variable,
so concurrent requests on different threads or tasks never see each other's
fields. Handlers add fields with ``add_instrumentation_data``; the dict is
handed to the instrumentation callback when the call ends, whether it
succeeded or failed.

Fields recorded by the server:
    method, tool_name, tool_arguments, prompt_name, resource_uri, client,
    error, duration (seconds)
"""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

InstrumentationCallback = Callable[[dict[str, Any]], None]

_current_data: ContextVar[dict[str, Any] | None] = ContextVar(
    "switchboard_instrumentation_data", default=None
)


@contextmanager
def instrument_call(method: str, callback: InstrumentationCallback) -> Iterator[dict[str, Any]]:
    """Collect instrumentation data for one call and report it on exit."""
    data: dict[str, Any] = {"method": method}
    token = _current_data.set(data)
    start = time.monotonic()
    try:
        yield data
    finally:
        data["duration"] = time.monotonic() - start
        _current_data.reset(token)
        callback(data)


def add_instrumentation_data(**fields: Any) -> None:
    """Merge fields into the current call's data. No-op outside a call."""
    data = _current_data.get()
    if data is not None:
        data.update(fields)


def current_instrumentation_data() -> dict[str, Any] | None:
    return _current_data.get()


__all__ = [
    "InstrumentationCallback",
    "add_instrumentation_data",
    "current_instrumentation_data",
    "instrument_call",
]
