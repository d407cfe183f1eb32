"""Switchboard CLI - run and inspect MCP servers.

Example:
    # Serve over stdio (default)
    switchboard serve --app examples.calculator_server:server

    # Serve over streamable HTTP
    switchboard serve --app examples.calculator_server:server --transport http --port 8000

    # Print the tools, prompts and resources a server exposes
    switchboard inspect --app examples.calculator_server:server
"""

import argparse
import importlib
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from switchboard.observability.logging import configure_logging
from switchboard.server.config import ServerSettings, configure, load_settings
from switchboard.server.http_transport import StreamableHTTPTransport
from switchboard.server.mcp_server import Server
from switchboard.server.stdio_transport import StdioTransport

logger = logging.getLogger(__name__)


class AppLoadError(Exception):
    """The --app target could not be loaded."""


def load_server(target: str, app_dir: str | None = None) -> Server:
    """Load a Server from ``module:attribute``.

    The attribute may be a Server or a zero-argument callable returning one.
    ``app_dir`` is put first on the import path, as uvicorn does with --app-dir.

    Raises:
        AppLoadError: If the target is malformed or does not yield a Server
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        msg = f"App must be given as module:attribute, got {target!r}"
        raise AppLoadError(msg)

    if app_dir is not None and app_dir not in sys.path:
        sys.path.insert(0, app_dir)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Could not import module {module_name!r}: {e}"
        raise AppLoadError(msg) from e

    try:
        obj = getattr(module, attribute)
    except AttributeError as e:
        msg = f"Module {module_name!r} has no attribute {attribute!r}"
        raise AppLoadError(msg) from e

    if not isinstance(obj, Server) and callable(obj):
        obj = obj()

    if not isinstance(obj, Server):
        msg = f"{target} is not a Server (got {type(obj).__name__})"
        raise AppLoadError(msg)

    return obj


def _settings_from_args(args: argparse.Namespace) -> ServerSettings:
    settings = load_settings(Path(args.config) if args.config else None)

    overrides: dict[str, Any] = {}
    for name in ("transport", "host", "port", "path", "log_level"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, "stateless", False):
        overrides["stateless"] = True
    if getattr(args, "json_logs", False):
        overrides["structured_logging"] = True

    return replace(settings, **overrides)


def _apply_settings(settings: ServerSettings) -> None:
    configure_logging(settings.log_level, structured=settings.structured_logging)

    # Must happen before the app module builds its Server
    overrides: dict[str, Any] = {
        "validate_tool_call_arguments": settings.validate_tool_call_arguments
    }
    if settings.protocol_version is not None:
        overrides["protocol_version"] = settings.protocol_version
    configure(**overrides)


def serve(args: argparse.Namespace) -> int:
    """Start an MCP server.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        settings = _settings_from_args(args)
        _apply_settings(settings)
        server = load_server(args.app, args.app_dir)
    except (AppLoadError, ValueError) as e:
        logger.error("%s", e)
        return 1

    try:
        if settings.transport == "http":
            transport = StreamableHTTPTransport(
                server,
                stateless=settings.stateless,
                keepalive_interval=settings.keepalive_interval,
            )
            transport.run(host=settings.host, port=settings.port, path=settings.path)
        else:
            StdioTransport(server).open()
        return 0
    except KeyboardInterrupt:
        return 0
    except Exception:
        logger.exception("MCP server error")
        return 1


def inspect_app(args: argparse.Namespace) -> int:
    """Print a server's tools, prompts and resources as JSON."""
    configure_logging(args.log_level or "WARNING")
    try:
        server = load_server(args.app, args.app_dir)
    except (AppLoadError, ValueError) as e:
        logger.error("%s", e)
        return 1

    summary = {
        "serverInfo": server.server_info,
        "capabilities": server.capabilities,
        "tools": server.registry.list_tools(),
        "prompts": server.registry.list_prompts(),
        "resources": server.registry.list_resources(),
        "resourceTemplates": server.registry.list_resource_templates(),
    }
    json.dump(summary, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="switchboard",
        description="Run and inspect Model Context Protocol servers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (default: from settings, INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    serve_parser = subparsers.add_parser("serve", help="Start an MCP server")
    serve_parser.add_argument("--app", "-a", required=True, help="Server as module:attribute")
    serve_parser.add_argument("--app-dir", default=".", help="Directory to import the app from")
    serve_parser.add_argument("--transport", "-t", choices=["stdio", "http"], default=None)
    serve_parser.add_argument("--host", default=None, help="HTTP bind host")
    serve_parser.add_argument("--port", "-p", type=int, default=None, help="HTTP port")
    serve_parser.add_argument("--path", default=None, help="HTTP endpoint path")
    serve_parser.add_argument(
        "--stateless", action="store_true", help="Run the HTTP transport without sessions"
    )
    serve_parser.add_argument("--json-logs", action="store_true", help="Log JSON lines")
    serve_parser.add_argument("--config", "-c", default=None, help="Path to YAML settings file")
    serve_parser.set_defaults(func=serve)

    inspect_parser = subparsers.add_parser("inspect", help="Print a server's capabilities")
    inspect_parser.add_argument("--app", "-a", required=True, help="Server as module:attribute")
    inspect_parser.add_argument("--app-dir", default=".", help="Directory to import the app from")
    inspect_parser.set_defaults(func=inspect_app)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
