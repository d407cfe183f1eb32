"""MCP method names and capability gating."""

from collections.abc import Mapping
from typing import Any

from switchboard.framework.errors import MissingRequiredCapabilityError


class Methods:
    """Protocol method names."""

    INITIALIZE = "initialize"
    PING = "ping"
    LOGGING_SET_LEVEL = "logging/setLevel"

    PROMPTS_GET = "prompts/get"
    PROMPTS_LIST = "prompts/list"
    COMPLETION_COMPLETE = "completion/complete"

    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"
    RESOURCES_TEMPLATES_LIST = "resources/templates/list"
    RESOURCES_SUBSCRIBE = "resources/subscribe"
    RESOURCES_UNSUBSCRIBE = "resources/unsubscribe"

    TOOLS_CALL = "tools/call"
    TOOLS_LIST = "tools/list"

    ROOTS_LIST = "roots/list"
    SAMPLING_CREATE_MESSAGE = "sampling/createMessage"
    ELICITATION_CREATE = "elicitation/create"

    # Notifications
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    NOTIFICATIONS_TOOLS_LIST_CHANGED = "notifications/tools/list_changed"
    NOTIFICATIONS_PROMPTS_LIST_CHANGED = "notifications/prompts/list_changed"
    NOTIFICATIONS_RESOURCES_LIST_CHANGED = "notifications/resources/list_changed"
    NOTIFICATIONS_RESOURCES_UPDATED = "notifications/resources/updated"
    NOTIFICATIONS_ROOTS_LIST_CHANGED = "notifications/roots/list_changed"
    NOTIFICATIONS_MESSAGE = "notifications/message"
    NOTIFICATIONS_PROGRESS = "notifications/progress"
    NOTIFICATIONS_CANCELLED = "notifications/cancelled"


# Capability paths each method requires, checked in order. Methods missing
# from this table (initialize, ping, progress, ...) need no capability.
REQUIRED_CAPABILITIES: dict[str, tuple[tuple[str, ...], ...]] = {
    Methods.PROMPTS_GET: (("prompts",),),
    Methods.PROMPTS_LIST: (("prompts",),),
    Methods.NOTIFICATIONS_PROMPTS_LIST_CHANGED: (("prompts",), ("prompts", "listChanged")),
    Methods.RESOURCES_LIST: (("resources",),),
    Methods.RESOURCES_TEMPLATES_LIST: (("resources",),),
    Methods.RESOURCES_READ: (("resources",),),
    Methods.NOTIFICATIONS_RESOURCES_LIST_CHANGED: (("resources",), ("resources", "listChanged")),
    Methods.RESOURCES_SUBSCRIBE: (("resources",), ("resources", "subscribe")),
    Methods.RESOURCES_UNSUBSCRIBE: (("resources",), ("resources", "subscribe")),
    Methods.NOTIFICATIONS_RESOURCES_UPDATED: (("resources",), ("resources", "subscribe")),
    Methods.TOOLS_CALL: (("tools",),),
    Methods.TOOLS_LIST: (("tools",),),
    Methods.NOTIFICATIONS_TOOLS_LIST_CHANGED: (("tools",), ("tools", "listChanged")),
    Methods.LOGGING_SET_LEVEL: (("logging",),),
    Methods.NOTIFICATIONS_MESSAGE: (("logging",),),
    Methods.COMPLETION_COMPLETE: (("completions",),),
    Methods.ROOTS_LIST: (("roots",),),
    Methods.NOTIFICATIONS_ROOTS_LIST_CHANGED: (("roots",), ("roots", "listChanged")),
    Methods.SAMPLING_CREATE_MESSAGE: (("sampling",),),
    Methods.ELICITATION_CREATE: (("elicitation",),),
}


def has_capability(capabilities: Mapping[str, Any], *path: str) -> bool:
    """Check whether a capability path is declared.

    A declared capability is any value other than None or False, so an empty
    mapping such as ``{"logging": {}}`` counts as declared.
    """
    value: Any = capabilities
    for key in path:
        if not isinstance(value, Mapping):
            return False
        value = value.get(key)
    return value is not None and value is not False


def ensure_capability(method: str, capabilities: Mapping[str, Any]) -> None:
    """Raise if ``capabilities`` does not allow ``method``.

    Raises:
        MissingRequiredCapabilityError: naming the first missing capability
    """
    for path in REQUIRED_CAPABILITIES.get(method, ()):
        if not has_capability(capabilities, *path):
            raise MissingRequiredCapabilityError(method, ".".join(path))


__all__ = ["REQUIRED_CAPABILITIES", "Methods", "ensure_capability", "has_capability"]
