"""Protocol core: JSON-RPC dispatch, method names and version negotiation."""

from . import jsonrpc
from .methods import Methods, ensure_capability
from .protocol import LATEST_STABLE_PROTOCOL_VERSION, SUPPORTED_STABLE_PROTOCOL_VERSIONS

__all__ = [
    "LATEST_STABLE_PROTOCOL_VERSION",
    "SUPPORTED_STABLE_PROTOCOL_VERSIONS",
    "Methods",
    "ensure_capability",
    "jsonrpc",
]
