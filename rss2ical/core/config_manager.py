"""Environment-driven configuration for the rss2ical server."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


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

        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue

        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip().strip('"').strip("'")

        if key:
            result[key] = val

    return result


def _env_int(cfg: dict[str, Any], key: str, *names: str) -> None:
    for name in names:
        raw = os.environ.get(name)
        if not raw:
            continue
        try:
            cfg[key] = int(raw)
        except ValueError:
            logger.warning("Invalid %s=%r; ignoring", name, raw)
        return


class ConfigManager:
    """Builds configuration from environment variables and a .env file."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file into os.environ without overriding existing variables.

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
        - PORT or RSS2ICAL_WEB_PORT -> 'server_port' (int)
        - RSS2ICAL_WEB_HOST -> 'server_bind'
        - RSS2ICAL_LOG_LEVEL -> 'log_level'
        - RSS2ICAL_DEBUG -> 'debug_logging' (bool)
        - RSS2ICAL_CACHE_MAX_ENTRIES -> 'cache_max_entries' (int)
        - RSS2ICAL_CACHE_SWEEP_INTERVAL -> 'cache_sweep_interval_seconds' (int)

        Returns:
            Configuration dictionary containing only keys that were set
        """
        cfg: dict[str, Any] = {}

        _env_int(cfg, "server_port", "RSS2ICAL_WEB_PORT", "PORT")

        host = os.environ.get("RSS2ICAL_WEB_HOST")
        if host:
            cfg["server_bind"] = host

        log_level = os.environ.get("RSS2ICAL_LOG_LEVEL")
        if log_level:
            cfg["log_level"] = log_level.upper()

        debug = os.environ.get("RSS2ICAL_DEBUG")
        if debug:
            cfg["debug_logging"] = debug.strip().lower() in ("1", "true", "yes", "on")

        _env_int(cfg, "cache_max_entries", "RSS2ICAL_CACHE_MAX_ENTRIES")
        _env_int(cfg, "cache_sweep_interval_seconds", "RSS2ICAL_CACHE_SWEEP_INTERVAL")

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment."""
        self.load_env_file()
        return self.build_config_from_env()


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Get configuration value supporting both dict and dataclass-like objects.

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
