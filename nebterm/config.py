"""Runtime settings and the persisted user configuration.

Settings come from environment variables:
    ONE_XMLRPC: XML-RPC endpoint URL
    NEBTERM_TIMEOUT: HTTP timeout in seconds (default 30)
    NEBTERM_LOG_LEVEL: logging level name (default WARNING)
    NEBTERM_DEFINITIONS_DIR: extra resource-description directory

The user configuration (last endpoint and username) is a small JSON file
under the XDG config directory, readable only by its owner.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:2633/RPC2"
DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "WARNING"
APP_DIR_NAME = "nebterm"


def config_dir() -> Path:
    """Directory holding nebterm's config and log files."""
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def request_timeout() -> float:
    raw = os.environ.get("NEBTERM_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid NEBTERM_TIMEOUT={raw!r}")
        return DEFAULT_TIMEOUT


def log_level() -> str:
    return os.environ.get("NEBTERM_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def extra_definitions_dir() -> Optional[Path]:
    raw = os.environ.get("NEBTERM_DEFINITIONS_DIR")
    return Path(raw) if raw else None


@dataclass
class UserConfig:
    """Persisted user preferences."""
    endpoint: Optional[str] = None
    username: Optional[str] = None

    @staticmethod
    def default_path() -> Path:
        return config_dir() / "config.json"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "UserConfig":
        """Load from disk, falling back to defaults on any problem."""
        path = path or cls.default_path()
        if not path.exists():
            return cls()
        try:
            with open(path, "r") as f:
                data = json.load(f)
            return cls(
                endpoint=data.get("endpoint"),
                username=data.get("username"),
            )
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
            return cls()

    def save(self, path: Optional[Path] = None) -> None:
        path = path or self.default_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)
        os.chmod(path, 0o600)
        logger.debug(f"Saved config to {path}")

    def effective_endpoint(self, override: Optional[str] = None) -> str:
        """Explicit override, then ONE_XMLRPC, then saved endpoint, then default."""
        return (
            override
            or os.environ.get("ONE_XMLRPC")
            or self.endpoint
            or DEFAULT_ENDPOINT
        )
