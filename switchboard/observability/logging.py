"""Logging setup for switchboard processes."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per log line (ELK/Datadog style)."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "session_id": getattr(record, "session_id", None),
            "method": getattr(record, "method", None),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(
    level: str = "INFO", structured: bool = False, stream: TextIO | None = None
) -> None:
    """Configure the root logger.

    Logs go to stderr by default so they never mix with the stdio transport's
    protocol output on stdout.

    Args:
        level: Log level name
        structured: Emit JSON lines instead of plain text
        stream: Stream to log to (default: sys.stderr)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter() if structured else logging.Formatter(TEXT_FORMAT))
    logging.basicConfig(level=getattr(logging, level.upper()), handlers=[handler], force=True)


__all__ = ["JSONFormatter", "configure_logging"]
