"""
Tests for the buildez-mcp CLI.

Tests cover:
- buildez-mcp server start with various options
- buildez-mcp server status / stop
- buildez-mcp build and slug
- The server record during the server lifecycle
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import yaml
from typer.testing import CliRunner

from buildez_mcp import __version__
from buildez_mcp.adapters import OperationResult
from buildez_mcp.cli import app

runner = CliRunner()


@pytest.fixture
def project_path(tmp_path, monkeypatch):
    """Project directory with .buildez/, used as the working directory."""
    path = tmp_path / "project"
    (path / ".buildez").mkdir(parents=True)
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def record_path(project_path):
    return project_path / ".buildez" / "mcp-server.yaml"


def write_record(path, **fields):
    record = {"pid": os.getpid(), "mode": "stdio", "api_url": "http://localhost:3000"}
    record.update(fields)
    path.write_text(yaml.safe_dump(record))


@pytest.fixture
def mock_server_class():
    with patch("buildez_mcp.cli.commands.server.MCPServer") as server_class, \
         patch("buildez_mcp.cli.commands.server._release_on_signal"), \
         patch("buildez_mcp.cli.commands.server.configure_logging"):
        server_class.return_value = MagicMock()
        yield server_class


class TestServerStart:
    """Test `buildez-mcp server start`."""

    def test_start_default(self, project_path, mock_server_class):
        result = runner.invoke(app, ["server", "start"])

        assert result.exit_code == 0
        assert "Starting MCP server" in result.output
        assert "Mode: stdio" in result.output
        assert "Listening on" not in result.output
        mock_server_class.return_value.start.assert_called_once()

    def test_start_http(self, project_path, mock_server_class):
        result = runner.invoke(
            app, ["server", "start", "--mode", "http", "--host", "0.0.0.0", "--port", "9000"]
        )

        assert result.exit_code == 0
        assert "Mode: http" in result.output
        assert "Listening on 0.0.0.0:9000" in result.output

        kwargs = mock_server_class.call_args.kwargs
        assert kwargs["mode"] == "http"
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000

    def test_options_override_environment(self, project_path, mock_server_class, monkeypatch):
        monkeypatch.setenv("BUILDEZ_API_URL", "http://from-env:3000")
        monkeypatch.setenv("MCP_PORT", "4000")

        result = runner.invoke(app, ["server", "start", "--api-url", "http://from-cli:3000"])

        assert result.exit_code == 0
        kwargs = mock_server_class.call_args.kwargs
        assert kwargs["api_url"] == "http://from-cli:3000"
        assert kwargs["port"] == 4000

    def test_record_describes_running_server(self, record_path, mock_server_class):
        """While the server runs its record holds the effective settings."""
        seen = []
        mock_server_class.return_value.start.side_effect = (
            lambda: seen.append(yaml.safe_load(record_path.read_text()))
        )

        result = runner.invoke(
            app, ["server", "start", "--mode", "http", "--port", "9000", "--api-url", "http://api.internal"]
        )

        assert result.exit_code == 0
        assert seen[0]["pid"] == os.getpid()
        assert seen[0]["mode"] == "http"
        assert seen[0]["port"] == 9000
        assert seen[0]["api_url"] == "http://api.internal"
        assert not record_path.exists()

    def test_server_already_running(self, record_path, mock_server_class):
        write_record(record_path, mode="http", port=3001)

        result = runner.invoke(app, ["server", "start"])

        assert result.exit_code == 1
        assert "already running" in result.output
        mock_server_class.return_value.start.assert_not_called()
        assert record_path.exists()

    def test_start_failure_releases_record(self, record_path, mock_server_class):
        mock_server_class.return_value.start.side_effect = RuntimeError(
            "Port 9000 already in use. Choose a different port or stop the conflicting service."
        )

        result = runner.invoke(app, ["server", "start", "--mode", "http", "--port", "9000"])

        assert result.exit_code == 1
        assert "Error starting server" in result.output
        assert not record_path.exists()

    def test_invalid_mode(self, record_path):
        with patch("buildez_mcp.cli.commands.server.configure_logging"):
            result = runner.invoke(app, ["server", "start", "--mode", "sse"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert not record_path.exists()

    def test_invalid_env_port(self, project_path, mock_server_class, monkeypatch):
        monkeypatch.setenv("MCP_PORT", "abc")

        result = runner.invoke(app, ["server", "start"])

        assert result.exit_code == 1
        assert "Invalid MCP_PORT" in result.output
        mock_server_class.assert_not_called()


class TestServerStatus:
    """Test `buildez-mcp server status`."""

    def test_status_not_running(self, project_path):
        result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 1
        assert "Not running" in result.output

    def test_status_stale_record(self, record_path):
        write_record(record_path, pid=999999)

        result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 1
        assert "Not running" in result.output

    def test_status_reports_record_not_config(self, record_path, monkeypatch):
        """Status shows what the server was started with, not current config."""
        write_record(record_path, api_url="http://started-with:3000")
        monkeypatch.setenv("BUILDEZ_API_URL", "http://configured-now:3000")

        result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 0
        assert "Running" in result.output
        assert str(os.getpid()) in result.output
        assert "http://started-with:3000" in result.output
        assert "configured-now" not in result.output
        assert "Health" not in result.output

    def test_status_http_healthy(self, record_path):
        write_record(record_path, mode="http", host="0.0.0.0", port=3001)

        with patch(
            "buildez_mcp.cli.commands.server.httpx.get",
            return_value=httpx.Response(200, json={"status": "ok", "server": "buildez-mcp"}),
        ) as mock_get:
            result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 0
        assert "0.0.0.0:3001" in result.output
        assert "ok" in result.output
        assert mock_get.call_args.args[0] == "http://127.0.0.1:3001/health"

    def test_status_http_unreachable(self, record_path):
        write_record(record_path, mode="http", host="127.0.0.1", port=3001)

        with patch(
            "buildez_mcp.cli.commands.server.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 0
        assert "unreachable" in result.output


class TestServerStop:
    """Test `buildez-mcp server stop`."""

    def test_stop_no_server(self, project_path):
        result = runner.invoke(app, ["server", "stop"])

        assert result.exit_code == 1
        assert "No MCP server running" in result.output

    def test_stop_success(self, project_path):
        with patch(
            "buildez_mcp.cli.commands.server.ServerStateFile.stop", return_value=True
        ) as mock_stop:
            result = runner.invoke(app, ["server", "stop", "--timeout", "5"])

        assert result.exit_code == 0
        assert "Server stopped successfully" in result.output
        mock_stop.assert_called_once_with(timeout=5)

    def test_stop_timeout(self, project_path):
        with patch(
            "buildez_mcp.cli.commands.server.ServerStateFile.stop", return_value=False
        ):
            result = runner.invoke(app, ["server", "stop", "--timeout", "3"])

        assert result.exit_code == 1
        assert "did not stop within 3 seconds" in result.output


class TestBuildCommands:
    """Test `buildez-mcp build` and `buildez-mcp slug`."""

    def test_build_success(self, project_path):
        operation = AsyncMock(return_value=OperationResult.success_result(
            'Website "Joe\'s Pizza" created successfully!',
            data={"projectId": "joe-s-pizza"},
        ))

        with patch("buildez_mcp.cli.commands.build.build_website_operation", operation), \
             patch("buildez_mcp.cli.commands.build.configure_logging"):
            result = runner.invoke(app, ["build", "Joe's Pizza", "family pizzeria in Boston"])

        assert result.exit_code == 0
        assert '"projectId": "joe-s-pizza"' in result.output
        args = operation.call_args.args
        assert args[0].base_url == "http://localhost:3000"
        assert args[1:] == ("Joe's Pizza", "family pizzeria in Boston", "https://buildez.ai")

    def test_build_failure_exit_code(self, project_path):
        operation = AsyncMock(return_value=OperationResult.error_result("AI quota exceeded"))

        with patch("buildez_mcp.cli.commands.build.build_website_operation", operation), \
             patch("buildez_mcp.cli.commands.build.configure_logging"):
            result = runner.invoke(
                app, ["build", "Joe's Pizza", "pizzeria", "--api-url", "http://api.internal"]
            )

        assert result.exit_code == 1
        assert "AI quota exceeded" in result.output
        assert operation.call_args.args[0].base_url == "http://api.internal"

    @pytest.mark.parametrize(
        "name,expected",
        [("Joe's Pizza", "joe-s-pizza"), ("!!!", "website")],
    )
    def test_slug(self, project_path, name, expected):
        result = runner.invoke(app, ["slug", name])

        assert result.exit_code == 0
        assert result.output.strip() == expected

    def test_slug_check(self, project_path):
        resolve = AsyncMock(return_value="joe-s-pizza-2")

        with patch("buildez_mcp.cli.commands.build.get_available_web_id", resolve):
            result = runner.invoke(app, ["slug", "Joe's Pizza", "--check"])

        assert result.exit_code == 0
        assert result.output.strip() == "joe-s-pizza-2"
        assert resolve.call_args.args[1] == "joe-s-pizza"


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
