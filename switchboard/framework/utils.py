"""Small helpers shared by the primitive definitions."""

import inspect
import re
from collections.abc import Callable, Iterable
from typing import Any

_ACRONYM_BOUNDARY = re.compile(r"(?<=[A-Z])(?=[A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"(?<=[a-z\d])(?=[A-Z])")


def underscore(name: str) -> str:
    """Convert a CamelCase name to snake_case.

    Examples:
        >>> underscore("AddNumbers")
        'add_numbers'
        >>> underscore("HTTPRequestTool")
        'http_request_tool'
    """
    name = _ACRONYM_BOUNDARY.sub("_", name)
    name = _WORD_BOUNDARY.sub("_", name)
    return name.replace("-", "_").lower()


def handle_from_name(qualified_name: str) -> str:
    """Derive a primitive handle from a (possibly dotted) class or function name."""
    return underscore(qualified_name.rsplit(".", 1)[-1])


def accepts_server_context(func: Callable[..., Any]) -> bool:
    """Check whether a callable takes a `server_context` keyword (or **kwargs)."""
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        param.kind is inspect.Parameter.VAR_KEYWORD or param.name == "server_context"
        for param in parameters
    )


def compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


def icons_to_list(icons: Iterable[Any] | None) -> list[dict[str, Any]] | None:
    """Serialize icons, or None when there are none."""
    serialized = [icon.to_dict() for icon in icons or ()]
    return serialized or None


__all__ = ["accepts_server_context", "compact", "handle_from_name", "icons_to_list", "underscore"]
