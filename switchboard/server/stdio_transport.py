"""
Line-delimited stdio transport.

Reads one JSON-RPC message per line, dispatches it through the server, and
writes each response as one line. The whole connection shares a single
request context.
"""

import json
import logging
import sys
import threading
from typing import Any, TextIO

from switchboard.server.context import RequestContext
from switchboard.server.transport import Transport

logger = logging.getLogger(__name__)


class StdioTransport(Transport):
    """Blocking stdio transport.

    Args:
        server: Server to dispatch to
        input_stream: Stream to read requests from (default: sys.stdin)
        output_stream: Stream to write responses to (default: sys.stdout)
    """

    def __init__(
        self,
        server: Any,
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None,
    ) -> None:
        super().__init__(server)
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        self.context = RequestContext()
        self._write_lock = threading.Lock()
        self._open = False

    def open(self) -> None:
        """Serve until EOF or ``close()``."""
        self._open = True
        logger.info("stdio transport started")
        try:
            while self._open:
                line = self.input_stream.readline()
                if not line:
                    break

                line = line.strip()
                if not line:
                    continue

                response = self.server.handle_json(line, context=self.context)
                if response is not None:
                    self._write_line(response)
        finally:
            self._open = False
            logger.info("stdio transport stopped")

    def close(self) -> None:
        self._open = False

    def send_notification(self, method: str, params: dict[str, Any] | None = None) -> bool:
        self._write_line(json.dumps(self.build_notification(method, params), separators=(",", ":")))
        return True

    def _write_line(self, payload: str) -> None:
        with self._write_lock:
            self.output_stream.write(payload + "\n")
            self.output_stream.flush()


__all__ = ["StdioTransport"]
