"""Tests for the switchboard CLI."""

import json
import sys
import types
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from switchboard.cli import AppLoadError, create_parser, load_server, main
from switchboard.server.config import ServerSettings
from switchboard.server.mcp_server import Server

APP_MODULE = "switchboard_cli_test_app"


@pytest.fixture(autouse=True)
def isolated_sys_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "path", list(sys.path))


@pytest.fixture
def app_module() -> Iterator[types.ModuleType]:
    """Register an importable module holding a server."""
    module = types.ModuleType(APP_MODULE)
    module.server = Server(name="cli_app")
    module.build = lambda: Server(name="built")
    module.not_a_server = 42
    sys.modules[APP_MODULE] = module
    yield module
    del sys.modules[APP_MODULE]


class TestLoadServer:
    """Test loading a server from module:attribute."""

    def test_loads_attribute(self, app_module: types.ModuleType) -> None:
        """Test a Server attribute is returned as is."""
        assert load_server(f"{APP_MODULE}:server") is app_module.server

    def test_calls_factory(self, app_module: types.ModuleType) -> None:
        """Test a factory is called."""
        assert load_server(f"{APP_MODULE}:build").name == "built"

    @pytest.mark.parametrize(
        ("target", "message"),
        [
            ("no_colon", "module:attribute"),
            ("definitely_not_a_module_xyz:server", "Could not import module"),
            (f"{APP_MODULE}:missing", "has no attribute"),
            (f"{APP_MODULE}:not_a_server", "is not a Server"),
        ],
    )
    def test_errors(self, app_module: types.ModuleType, target: str, message: str) -> None:
        """Test malformed and invalid targets."""
        with pytest.raises(AppLoadError, match=message):
            load_server(target)

    def test_app_dir(self, tmp_path: Path) -> None:
        """Test modules are imported from the given directory."""
        (tmp_path / "dir_app_for_cli.py").write_text(
            "from switchboard import Server\nserver = Server(name='from_dir')\n"
        )
        server = load_server("dir_app_for_cli:server", str(tmp_path))

        assert server.name == "from_dir"
        sys.modules.pop("dir_app_for_cli", None)


class TestParser:
    """Test argument parsing."""

    def test_serve_arguments(self) -> None:
        """Test serve options."""
        args = create_parser().parse_args(
            ["serve", "--app", "m:s", "--transport", "http", "--port", "9000", "--stateless"]
        )

        assert args.app == "m:s"
        assert args.transport == "http"
        assert args.port == 9000
        assert args.stateless is True
        assert args.app_dir == "."

    def test_no_command(self) -> None:
        """Test running without a command prints help and fails."""
        assert main([]) == 1


class TestCommands:
    """Test command execution."""

    def test_inspect(
        self, app_module: types.ModuleType, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test inspect prints the server summary as JSON."""
        with patch("switchboard.cli.configure_logging"):
            exit_code = main(["inspect", "--app", f"{APP_MODULE}:server"])

        summary = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert summary["serverInfo"] == {"name": "cli_app", "version": "0.1.0"}
        assert summary["tools"] == []

    def test_serve_stdio(self, app_module: types.ModuleType) -> None:
        """Test serve opens the stdio transport by default."""
        with (
            patch("switchboard.cli.configure_logging"),
            patch("switchboard.cli.load_settings") as load_settings,
            patch("switchboard.cli.StdioTransport") as stdio,
        ):
            load_settings.return_value = ServerSettings()
            exit_code = main(["serve", "--app", f"{APP_MODULE}:server"])

        assert exit_code == 0
        stdio.assert_called_once_with(app_module.server)
        stdio.return_value.open.assert_called_once_with()

    def test_serve_http(self, app_module: types.ModuleType) -> None:
        """Test serve runs the HTTP transport with CLI overrides."""
        with (
            patch("switchboard.cli.configure_logging"),
            patch("switchboard.cli.load_settings") as load_settings,
            patch("switchboard.cli.StreamableHTTPTransport") as http,
        ):
            load_settings.return_value = ServerSettings()
            exit_code = main(
                ["serve", "--app", f"{APP_MODULE}:server", "--transport", "http", "--port", "9123"]
            )

        assert exit_code == 0
        http.assert_called_once_with(app_module.server, stateless=False, keepalive_interval=30.0)
        http.return_value.run.assert_called_once_with(host="127.0.0.1", port=9123, path="/mcp")

    def test_serve_bad_app(self) -> None:
        """Test serve fails cleanly when the app cannot be loaded."""
        with (
            patch("switchboard.cli.configure_logging"),
            patch("switchboard.cli.load_settings") as load_settings,
        ):
            load_settings.return_value = ServerSettings()
            assert main(["serve", "--app", "nowhere_module_xyz:server"]) == 1
