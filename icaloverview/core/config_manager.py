"""Configuration management for the icaloverview server."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SERVER_BIND = "127.0.0.1"
DEFAULT_SERVER_PORT = 8080
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_FETCH_CONCURRENCY = 2
MAX_FETCH_CONCURRENCY = 4


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Args:
        path: Path to .env file

    Returns:
        Dictionary of key-value pairs from the .env file.
        Empty dict if file doesn't exist or cannot be read.

    Note:
        - Skips empty lines and comments (lines starting with #)
        - Strips quotes (both single and double) from values
        - Handles KEY=VALUE format with optional whitespace
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}

    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Failed to read .env file (continuing): %s", str(path), exc_info=True)
        return {}

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip().strip('"').strip("'")
        if key:
            result[key] = val

    return result


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; ignoring", name, raw)
        return None


def _env_float(name: str) -> float | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; ignoring", name, raw)
        return None
    if value <= 0:
        logger.warning("Non-positive %s=%r; ignoring", name, raw)
        return None
    return value


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file into the environment without overriding existing keys.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))
        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from environment variables.

        Recognizes:
        - ICALOVERVIEW_SOURCES_FILE -> 'sources_file'
        - ICALOVERVIEW_WEB_HOST -> 'server_bind'
        - ICALOVERVIEW_WEB_PORT -> 'server_port' (int)
        - ICALOVERVIEW_REQUEST_TIMEOUT -> 'request_timeout' (float seconds)
        - ICALOVERVIEW_FETCH_CONCURRENCY -> 'fetch_concurrency' (int, clamped 1-4)
        - ICALOVERVIEW_TIMEZONE -> 'display_timezone'
        - ICALOVERVIEW_LOG_LEVEL -> 'log_level'

        Returns:
            Configuration dictionary with defaults filled in
        """
        cfg: dict[str, Any] = {
            "server_bind": DEFAULT_SERVER_BIND,
            "server_port": DEFAULT_SERVER_PORT,
            "request_timeout": DEFAULT_REQUEST_TIMEOUT,
            "fetch_concurrency": DEFAULT_FETCH_CONCURRENCY,
        }

        sources_file = os.environ.get("ICALOVERVIEW_SOURCES_FILE")
        if sources_file:
            cfg["sources_file"] = sources_file

        host = os.environ.get("ICALOVERVIEW_WEB_HOST")
        if host:
            cfg["server_bind"] = host

        port = _env_int("ICALOVERVIEW_WEB_PORT")
        if port is not None:
            cfg["server_port"] = port

        timeout = _env_float("ICALOVERVIEW_REQUEST_TIMEOUT")
        if timeout is not None:
            cfg["request_timeout"] = timeout

        concurrency = _env_int("ICALOVERVIEW_FETCH_CONCURRENCY")
        if concurrency is not None:
            cfg["fetch_concurrency"] = max(1, min(concurrency, MAX_FETCH_CONCURRENCY))

        display_tz = os.environ.get("ICALOVERVIEW_TIMEZONE")
        if display_tz:
            cfg["display_timezone"] = display_tz

        log_level = os.environ.get("ICALOVERVIEW_LOG_LEVEL")
        if log_level:
            cfg["log_level"] = log_level

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment."""
        self.load_env_file()
        return self.build_config_from_env()


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Get configuration value supporting both dict and attribute-style objects.

    Args:
        config: Configuration object (dict or object with attributes)
        key: Configuration key to retrieve
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
