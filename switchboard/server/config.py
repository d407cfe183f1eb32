"""Configuration management.

Two layers live here:

- ``Configuration``: protocol-level behavior (protocol version, exception
  reporter, instrumentation callback, argument validation). A process-wide
  default is set with ``configure()`` and merged with each server's own
  configuration.
- ``ServerSettings``: deployment settings for the CLI (transport, host, port,
  logging), loaded from YAML and environment variables.

Settings precedence (highest to lowest):
1. Environment variables (SWITCHBOARD_*)
2. YAML config file
3. Default values

Example switchboard.yml:
    server:
      transport: "http"
      host: "127.0.0.1"
      port: 8000
      stateless: false
      log_level: "INFO"
      protocol_version: "2025-06-18"

Usage:
    configure(exception_reporter=sentry_reporter)
    settings = load_settings()
"""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from switchboard.core.protocol import LATEST_STABLE_PROTOCOL_VERSION, validate_protocol_version
from switchboard.framework.instrumentation import InstrumentationCallback

logger = logging.getLogger(__name__)

ExceptionReporter = Callable[[BaseException, dict[str, Any]], None]

VALID_TRANSPORTS = ("stdio", "http")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_exception_reporter(exception: BaseException, context: dict[str, Any]) -> None:
    logger.error("Unhandled error: %s (context: %s)", exception, context, exc_info=exception)


def default_instrumentation_callback(data: dict[str, Any]) -> None:
    logger.debug("Handled %s: %s", data.get("method"), data)


@dataclass(frozen=True)
class Configuration:
    """Protocol-level configuration.

    Attributes:
        exception_reporter: Called with (exception, context) for unexpected
            errors; None means log them
        instrumentation_callback: Called with the per-call data dict after
            every dispatched call; None means log at DEBUG
        protocol_version: Protocol version the server speaks by default;
            None means the latest stable version
        validate_tool_call_arguments: Validate tool arguments against the
            tool's input schema before calling it
    """

    exception_reporter: ExceptionReporter | None = None
    instrumentation_callback: InstrumentationCallback | None = None
    protocol_version: str | None = None
    validate_tool_call_arguments: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.protocol_version is not None:
            validate_protocol_version(self.protocol_version)

        if not isinstance(self.validate_tool_call_arguments, bool):
            msg = "validate_tool_call_arguments must be a boolean"
            raise ValueError(msg)

    @property
    def effective_protocol_version(self) -> str:
        return self.protocol_version or LATEST_STABLE_PROTOCOL_VERSION

    def report_exception(self, exception: BaseException, context: dict[str, Any]) -> None:
        reporter = self.exception_reporter or default_exception_reporter
        reporter(exception, context)

    def instrument(self, data: dict[str, Any]) -> None:
        callback = self.instrumentation_callback or default_instrumentation_callback
        callback(data)

    def merge(self, other: "Configuration | None") -> "Configuration":
        """Overlay ``other`` on this configuration.

        Fields explicitly set on ``other`` win; ``validate_tool_call_arguments``
        always comes from ``other``.
        """
        if other is None:
            return self

        return Configuration(
            exception_reporter=other.exception_reporter or self.exception_reporter,
            instrumentation_callback=(
                other.instrumentation_callback or self.instrumentation_callback
            ),
            protocol_version=other.protocol_version or self.protocol_version,
            validate_tool_call_arguments=other.validate_tool_call_arguments,
        )


# Process-wide configuration
_global_configuration = Configuration()


def configure(**overrides: Any) -> Configuration:
    """Update the process-wide configuration.

    Args:
        **overrides: Configuration fields to set

    Returns:
        The new process-wide Configuration
    """
    global _global_configuration

    _global_configuration = replace(_global_configuration, **overrides)
    return _global_configuration


def get_configuration() -> Configuration:
    return _global_configuration


def reset_configuration() -> None:
    """Restore the default process-wide configuration (used by tests)."""
    global _global_configuration

    _global_configuration = Configuration()


@dataclass(frozen=True)
class ServerSettings:
    """Deployment settings for running a server from the CLI.

    Attributes:
        transport: "stdio" or "http"
        host: HTTP bind host
        port: HTTP bind port
        path: HTTP endpoint path
        stateless: Run the HTTP transport without sessions
        keepalive_interval: Seconds between SSE keepalive pings
        log_level: Python log level name
        structured_logging: Emit JSON log lines instead of plain text
        protocol_version: Protocol version override (None = latest)
        validate_tool_call_arguments: Validate tool arguments against schemas
    """

    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
    path: str = "/mcp"
    stateless: bool = False
    keepalive_interval: float = 30.0
    log_level: str = "INFO"
    structured_logging: bool = False
    protocol_version: str | None = None
    validate_tool_call_arguments: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.transport not in VALID_TRANSPORTS:
            msg = f"transport must be one of {VALID_TRANSPORTS}, got {self.transport!r}"
            raise ValueError(msg)

        if not (0 < self.port < 65536):
            msg = f"port must be 1-65535, got {self.port}"
            raise ValueError(msg)

        if not self.path.startswith("/"):
            msg = f"path must start with '/', got {self.path!r}"
            raise ValueError(msg)

        if self.keepalive_interval <= 0:
            msg = f"keepalive_interval must be > 0, got {self.keepalive_interval}"
            raise ValueError(msg)

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            msg = f"log_level must be one of {VALID_LOG_LEVELS}, got {self.log_level!r}"
            raise ValueError(msg)

        if self.protocol_version is not None:
            validate_protocol_version(self.protocol_version)

    def to_configuration(self) -> Configuration:
        return Configuration(
            protocol_version=self.protocol_version,
            validate_tool_call_arguments=self.validate_tool_call_arguments,
        )


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Environment variable -> (field, parser)
_ENV_OVERRIDES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "SWITCHBOARD_TRANSPORT": ("transport", str),
    "SWITCHBOARD_HOST": ("host", str),
    "SWITCHBOARD_PORT": ("port", int),
    "SWITCHBOARD_PATH": ("path", str),
    "SWITCHBOARD_STATELESS": ("stateless", _parse_bool),
    "SWITCHBOARD_KEEPALIVE_INTERVAL": ("keepalive_interval", float),
    "SWITCHBOARD_LOG_LEVEL": ("log_level", str),
    "SWITCHBOARD_STRUCTURED_LOGGING": ("structured_logging", _parse_bool),
    "SWITCHBOARD_PROTOCOL_VERSION": ("protocol_version", str),
    "SWITCHBOARD_VALIDATE_TOOL_CALL_ARGUMENTS": ("validate_tool_call_arguments", _parse_bool),
}


def load_settings(config_path: Path | None = None) -> ServerSettings:
    """Load settings from a YAML file and environment variables.

    Args:
        config_path: Path to a YAML file (default: $SWITCHBOARD_CONFIG, then
            ./switchboard.yml). A missing file is not an error.

    Returns:
        ServerSettings

    Raises:
        ValueError: If a value is invalid
    """
    if config_path is None:
        config_path = Path(os.getenv("SWITCHBOARD_CONFIG", "switchboard.yml"))

    values: dict[str, Any] = {}

    if config_path.exists():
        logger.info("Loading configuration from %s", config_path)
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}

        known = {f.name for f in fields(ServerSettings)}
        server_section = yaml_config.get("server") or {}
        for key, value in server_section.items():
            if key in known:
                values[key] = value
            else:
                logger.warning("Ignoring unknown server setting: %s", key)
    else:
        logger.debug("No config file at %s, using defaults with environment overrides", config_path)

    # Environment variables (highest precedence)
    for env_name, (field_name, parse) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw:
            values[field_name] = parse(raw)

    try:
        return ServerSettings(**values)
    except ValueError as e:
        logger.exception("Configuration validation failed: %s", e)
        raise


__all__ = [
    "Configuration",
    "ExceptionReporter",
    "ServerSettings",
    "configure",
    "default_exception_reporter",
    "default_instrumentation_callback",
    "get_configuration",
    "load_settings",
    "reset_configuration",
]
