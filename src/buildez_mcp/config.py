"""
MCP server configuration and the running-server record.

Handles server configuration loading (.buildez/mcp-config.yaml plus
environment variables) and the .buildez/mcp-server.yaml record a running
server keeps about itself for the status and stop commands.
"""

import logging
import os
import signal
import time
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

import yaml

from buildez_mcp.adapters import API_TIMEOUT
from buildez_mcp.tools.build_tools import DEFAULT_EDITOR_URL

CONFIG_DIR = ".buildez"
CONFIG_FILE = "mcp-config.yaml"
STATE_FILE = "mcp-server.yaml"

logger = logging.getLogger(__name__)


def find_project_root(start: Optional[Path] = None) -> Path:
    """Return the nearest directory containing .buildez/, or start itself."""
    cwd = start or Path.cwd()
    current = cwd
    while current != current.parent:
        if (current / CONFIG_DIR).exists():
            return current
        current = current.parent
    return cwd


def _env_number(name: str, cast):
    try:
        return cast(os.environ[name])
    except ValueError:
        raise ValueError(
            f"Invalid {name}: {os.environ[name]}. "
            f"Must be a number."
        )


@dataclass
class MCPConfig:
    """
    MCP server configuration loaded from .buildez/mcp-config.yaml.

    Attributes:
        api_url: Buildez API base URL (default: "http://localhost:3000")
        mode: Transport mode ("stdio" or "http", default: "stdio")
        host: Listener bind address (default: "0.0.0.0")
        port: Listener port for http mode (default: 3001)
        editor_url: Origin of the Buildez editor (default: "https://buildez.ai")
        api_timeout: Build request timeout in seconds (default: 300)
        state_file: Running-server record (default: .buildez/mcp-server.yaml)
    """

    api_url: str = "http://localhost:3000"
    mode: Literal["stdio", "http"] = "stdio"
    host: str = "0.0.0.0"
    port: int = 3001
    editor_url: str = DEFAULT_EDITOR_URL
    api_timeout: float = API_TIMEOUT
    state_file: Optional[Path] = None

    @classmethod
    def load(cls, project_path: Path, use_config_file: bool = True) -> "MCPConfig":
        """
        Load MCP configuration from .buildez/mcp-config.yaml.

        Falls back to defaults if file doesn't exist. Environment variables
        override config file values.

        Args:
            project_path: Path to project root (contains .buildez/)
            use_config_file: Whether to read the YAML file at all

        Returns:
            MCPConfig instance with loaded/default values

        Raises:
            ValueError: If config file has invalid format or a numeric
                environment variable cannot be parsed
        """
        config_file = project_path / CONFIG_DIR / CONFIG_FILE
        config_dict = {}

        if use_config_file and config_file.exists():
            try:
                with open(config_file) as f:
                    config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
            if not isinstance(config_dict, dict):
                raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

        # Environment variables override config file
        if "BUILDEZ_API_URL" in os.environ:
            config_dict["api_url"] = os.environ["BUILDEZ_API_URL"]

        if "MCP_MODE" in os.environ:
            config_dict["mode"] = os.environ["MCP_MODE"]

        if "MCP_HOST" in os.environ:
            config_dict["host"] = os.environ["MCP_HOST"]

        if "MCP_PORT" in os.environ:
            config_dict["port"] = _env_number("MCP_PORT", int)

        if "BUILDEZ_EDITOR_URL" in os.environ:
            config_dict["editor_url"] = os.environ["BUILDEZ_EDITOR_URL"]

        if "BUILDEZ_API_TIMEOUT" in os.environ:
            config_dict["api_timeout"] = _env_number("BUILDEZ_API_TIMEOUT", float)

        if "state_file" not in config_dict:
            config_dict["state_file"] = project_path / CONFIG_DIR / STATE_FILE
        else:
            config_dict["state_file"] = Path(config_dict["state_file"])

        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

    def save(self, project_path: Path):
        """
        Save MCP configuration to .buildez/mcp-config.yaml.

        Args:
            project_path: Path to project root (contains .buildez/)
        """
        config_file = project_path / CONFIG_DIR / CONFIG_FILE
        config_file.parent.mkdir(parents=True, exist_ok=True)

        config_dict = {
            "api_url": self.api_url,
            "mode": self.mode,
            "host": self.host,
            "port": self.port,
            "editor_url": self.editor_url,
            "api_timeout": self.api_timeout,
        }

        with open(config_file, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def process_alive(pid: int) -> bool:
    """Return True if a process with this PID exists."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Owned by another user
        return True
    except OSError:
        return False
    return True


@dataclass
class ServerRecord:
    """
    What a running server reports about itself.

    Attributes:
        pid: Server process ID
        mode: Transport mode the server was started with
        api_url: Buildez API the server talks to
        host: Listener bind address (http mode only)
        port: Listener port (http mode only)
        started_at: ISO 8601 UTC start time
    """

    pid: int
    mode: str
    api_url: str
    host: Optional[str] = None
    port: Optional[int] = None
    started_at: Optional[str] = None

    @classmethod
    def for_current_process(cls, config: MCPConfig) -> "ServerRecord":
        """Describe this process serving the given configuration."""
        listening = config.mode == "http"
        return cls(
            pid=os.getpid(),
            mode=config.mode,
            api_url=config.api_url,
            host=config.host if listening else None,
            port=config.port if listening else None,
            started_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )

    @property
    def health_url(self) -> Optional[str]:
        """URL of the listener's /health route, or None in stdio mode."""
        if self.port is None:
            return None
        host = self.host if self.host not in (None, "", "0.0.0.0") else "127.0.0.1"
        return f"http://{host}:{self.port}/health"


class ServerStateFile:
    """
    The .buildez/mcp-server.yaml record of the running server.

    `server start` claims it, `server status` reports from it and
    `server stop` signals the process it names. At most one live server
    may hold it.
    """

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> Optional[ServerRecord]:
        """Load the record, or None if it is missing or unreadable."""
        if not self.path.exists():
            return None

        try:
            data = yaml.safe_load(self.path.read_text())
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable server record %s: %s", self.path, e)
            return None

        if not isinstance(data, dict) or not isinstance(data.get("pid"), int):
            logger.warning("Ignoring malformed server record %s", self.path)
            return None

        known = {f.name for f in fields(ServerRecord)}
        try:
            return ServerRecord(**{k: v for k, v in data.items() if k in known})
        except TypeError as e:
            logger.warning("Ignoring incomplete server record %s: %s", self.path, e)
            return None

    def live_record(self) -> Optional[ServerRecord]:
        """The record, if the process it names is still running."""
        record = self.read()
        if record is None or not process_alive(record.pid):
            return None
        return record

    def claim(self, record: ServerRecord) -> None:
        """
        Write the record for a starting server.

        Raises:
            RuntimeError: If another live server holds the record
        """
        current = self.live_record()
        if current is not None:
            raise RuntimeError(
                f"MCP server already running (PID: {current.pid}, mode: {current.mode}). "
                "Stop it first with: buildez-mcp server stop"
            )

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(asdict(record), f, sort_keys=False)

    def release(self) -> None:
        """Remove the record; a missing record is fine."""
        self.path.unlink(missing_ok=True)

    def stop(self, timeout: float = 10.0) -> bool:
        """
        Send SIGTERM to the recorded server and wait for it to exit.

        Args:
            timeout: Seconds to wait before giving up

        Returns:
            True once the process has exited, False on timeout

        Raises:
            RuntimeError: If no live server is recorded or it cannot be signalled
        """
        record = self.read()
        if record is None:
            raise RuntimeError(f"No MCP server running (no server record at {self.path}).")

        if not process_alive(record.pid):
            self.release()
            raise RuntimeError(
                f"MCP server (PID: {record.pid}) is not running. Removed its stale record."
            )

        try:
            os.kill(record.pid, signal.SIGTERM)
        except ProcessLookupError:
            self.release()
            return True
        except PermissionError as e:
            raise RuntimeError(
                f"Permission denied: cannot stop MCP server (PID: {record.pid})."
            ) from e

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if not process_alive(record.pid):
                self.release()
                return True
            time.sleep(0.2)
        return False
