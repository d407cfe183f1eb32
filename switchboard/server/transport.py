"""Transport base class."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class Transport:
    """Carries requests into a server and responses/notifications back out.

    Creating a transport attaches it to the server, so the server's
    ``notify_*`` methods deliver through it.
    """

    def __init__(self, server: Any) -> None:
        self.server = server
        server.transport = self

    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def send_notification(self, method: str, params: dict[str, Any] | None = None) -> Any:
        raise NotImplementedError

    @staticmethod
    def build_notification(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        notification: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params:
            notification["params"] = params
        return notification


__all__ = ["Transport"]
