"""
Protocol version negotiation and version-dependent field gating.

Protocol versions are ``YYYY-MM-DD`` strings and are ordered by plain string
comparison. That holds for every released version; a draft or suffixed
version token would need a real ordering.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from switchboard.framework.errors import ProtocolVersionError

LATEST_STABLE_PROTOCOL_VERSION = "2025-11-25"
SUPPORTED_STABLE_PROTOCOL_VERSIONS = (
    LATEST_STABLE_PROTOCOL_VERSION,
    "2025-06-18",
    "2025-03-26",
    "2024-11-05",
)

# serverInfo fields a given protocol version (and older) does not know about
UNSUPPORTED_UNTIL_2025_06_18 = frozenset({"description", "icons"})
UNSUPPORTED_UNTIL_2025_03_26 = frozenset({"title", "websiteUrl"})


def is_supported(version: Any) -> bool:
    return version in SUPPORTED_STABLE_PROTOCOL_VERSIONS


def validate_protocol_version(version: str) -> str:
    """Return ``version`` if supported.

    Raises:
        ProtocolVersionError: listing the supported versions
    """
    if not is_supported(version):
        supported = SUPPORTED_STABLE_PROTOCOL_VERSIONS
        msg = f"protocol_version must be {', '.join(supported[:-1])}, or {supported[-1]}"
        raise ProtocolVersionError(msg)
    return version


def negotiate_version(requested: Any, configured: str) -> str:
    """Echo a supported requested version, otherwise fall back to ``configured``."""
    if is_supported(requested):
        return requested
    return configured


def filter_server_info(server_info: Mapping[str, Any], version: str) -> dict[str, Any]:
    """Drop serverInfo fields the negotiated version does not define."""
    dropped: set[str] = set()
    if version <= "2025-06-18":
        dropped |= UNSUPPORTED_UNTIL_2025_06_18
    if version <= "2025-03-26":
        dropped |= UNSUPPORTED_UNTIL_2025_03_26
    return {key: value for key, value in server_info.items() if key not in dropped}


def supports_instructions(version: str) -> bool:
    return version != "2024-11-05"


def validate_definitions(
    version: str,
    server_info: Mapping[str, Any],
    instructions: str | None,
    tools: Iterable[Any],
    primitives: Iterable[Any],
) -> None:
    """Check a server's definitions against its configured protocol version.

    Args:
        version: Configured protocol version
        server_info: Compacted serverInfo mapping
        instructions: Server instructions, if any
        tools: Tool definitions
        primitives: Every titled definition (tools, prompts, resources, templates)

    Raises:
        ProtocolVersionError: On the first field the version does not support
    """
    if version <= "2025-06-18" and "description" in server_info:
        msg = (
            "Error occurred in server_info. `description` is not supported in "
            "protocol version 2025-06-18 or earlier"
        )
        raise ProtocolVersionError(msg)

    if version <= "2025-03-26":
        if "title" in server_info or "websiteUrl" in server_info:
            msg = (
                "Error occurred in server_info. `title` or `website_url` are not supported "
                "in protocol version 2025-03-26 or earlier"
            )
            raise ProtocolVersionError(msg)

        titles = [item.title for item in primitives if item.title]
        if titles:
            msg = (
                f"Error occurred in {', '.join(titles)}. `title` is not supported in "
                "protocol version 2025-03-26 or earlier"
            )
            raise ProtocolVersionError(msg)

    if not supports_instructions(version):
        if instructions:
            msg = "`instructions` supported by protocol version 2025-03-26 or higher"
            raise ProtocolVersionError(msg)

        annotated = [tool.name for tool in tools if tool.annotations is not None]
        if annotated:
            msg = (
                f"Error occurred in {', '.join(annotated)}. `annotations` are supported by "
                "protocol version 2025-03-26 or higher"
            )
            raise ProtocolVersionError(msg)


__all__ = [
    "LATEST_STABLE_PROTOCOL_VERSION",
    "SUPPORTED_STABLE_PROTOCOL_VERSIONS",
    "filter_server_info",
    "is_supported",
    "negotiate_version",
    "supports_instructions",
    "validate_definitions",
    "validate_protocol_version",
]
