"""Client-requested log levels for ``notifications/message``."""

from dataclasses import dataclass

LOG_LEVEL_SEVERITY = {
    "debug": 0,
    "info": 1,
    "notice": 2,
    "warning": 3,
    "error": 4,
    "critical": 5,
    "alert": 6,
    "emergency": 7,
}


@dataclass(frozen=True)
class LogLevelThreshold:
    """The minimum level a client asked to receive via ``logging/setLevel``."""

    level: str

    @property
    def valid(self) -> bool:
        return isinstance(self.level, str) and self.level in LOG_LEVEL_SEVERITY

    def should_notify(self, level: str) -> bool:
        """Whether a message at ``level`` meets the threshold."""
        if not isinstance(level, str) or level not in LOG_LEVEL_SEVERITY or not self.valid:
            return False
        return LOG_LEVEL_SEVERITY[level] >= LOG_LEVEL_SEVERITY[self.level]


__all__ = ["LOG_LEVEL_SEVERITY", "LogLevelThreshold"]
