"""OpenNebula credentials.

Resolved from, in order:
- ONE_AUTH: a path to a file containing `username:password`, or the string itself
- ~/.one/one_auth
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from nebterm.config import UserConfig
from nebterm.errors import ConfigurationError

logger = logging.getLogger(__name__)


def default_auth_file() -> Path:
    return Path.home() / ".one" / "one_auth"


def parse_auth_string(auth: str) -> tuple[str, str]:
    """Split `username:password` on the first colon only."""
    username, sep, password = auth.strip().partition(":")
    if not sep:
        raise ConfigurationError(
            "Invalid auth format. Expected 'username:password'"
        )
    return username, password


def _read_auth_file(path: Path) -> str:
    try:
        return path.read_text().strip()
    except OSError as e:
        raise ConfigurationError(f"Failed to read auth file {path}: {e}") from e


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str
    endpoint: str

    def auth_string(self) -> str:
        """The session string sent as the first parameter of every call."""
        return f"{self.username}:{self.password}"

    @classmethod
    def from_environment(
        cls,
        endpoint: Optional[str] = None,
        config: Optional[UserConfig] = None,
    ) -> "Credentials":
        """Resolve credentials from ONE_AUTH or the default auth file."""
        config = config or UserConfig()
        auth = os.environ.get("ONE_AUTH")
        if auth:
            path = Path(auth).expanduser()
            if path.exists():
                logger.debug(f"Reading credentials from {path}")
                auth = _read_auth_file(path)
        else:
            path = default_auth_file()
            if not path.exists():
                raise ConfigurationError(
                    "No OpenNebula credentials found. Set ONE_AUTH environment "
                    "variable or create ~/.one/one_auth"
                )
            auth = _read_auth_file(path)

        username, password = parse_auth_string(auth)
        return cls(
            username=username,
            password=password,
            endpoint=config.effective_endpoint(endpoint),
        )
