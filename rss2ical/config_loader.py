"""rss2ical.config_loader

Typed configuration for the rss2ical server.

- Optional YAML file, read with PyYAML safe_load.
- Environment values (see core.config_manager) override the file.
- Exposes a `Config` dataclass and `load_config()`.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .core.config_manager import ConfigManager

logger = logging.getLogger(__name__)

MIN_SWEEP_INTERVAL = 10
MAX_SWEEP_INTERVAL = 3600


@dataclass
class Config:
    """Typed configuration for rss2ical.

    Fields:
        server_bind: host to bind the HTTP server to
        server_port: port for the HTTP server
        log_level: logging level name
        debug_logging: enable DEBUG for rss2ical modules
        cache_max_entries: bound on cached feed URLs
        cache_sweep_interval_seconds: how often expired entries are purged (10..3600)
    """

    server_bind: str = "0.0.0.0"  # nosec: B104 - container default; override via env/config
    server_port: int = 8080
    log_level: str = "INFO"
    debug_logging: bool = False
    cache_max_entries: int = 1024
    cache_sweep_interval_seconds: int = 60

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int; out-of-range values are clamped
        with a warning.
        """
        if data is None:
            data = {}

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default

        server_port = _coerce_int("server_port", 8080)

        max_entries = _coerce_int("cache_max_entries", 1024)
        if max_entries < 1:
            logger.warning("cache_max_entries %d below minimum; coercing to 1", max_entries)
            max_entries = 1

        sweep = _coerce_int("cache_sweep_interval_seconds", 60)
        if sweep < MIN_SWEEP_INTERVAL:
            logger.warning("cache_sweep_interval_seconds %d below minimum; coercing to %d", sweep, MIN_SWEEP_INTERVAL)
            sweep = MIN_SWEEP_INTERVAL
        elif sweep > MAX_SWEEP_INTERVAL:
            logger.warning("cache_sweep_interval_seconds %d above maximum; coercing to %d", sweep, MAX_SWEEP_INTERVAL)
            sweep = MAX_SWEEP_INTERVAL

        server_bind = data.get("server_bind") or "0.0.0.0"  # nosec: B104 - fallback for empty config

        log_level = data.get("log_level") or "INFO"

        return cls(
            server_bind=str(server_bind),
            server_port=server_port,
            log_level=str(log_level).upper(),
            debug_logging=bool(data.get("debug_logging", False)),
            cache_max_entries=max_entries,
            cache_sweep_interval_seconds=sweep,
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def _load_yaml(path: Path) -> dict[str, Any]:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    # safe_load returns None for empty files
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", path, loaded)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    return loaded


def load_config(path: str | None = None, env_manager: ConfigManager | None = None) -> Config:
    """Load configuration from an optional YAML file plus the environment.

    Args:
        path: Optional path to a YAML config file. A missing file means defaults.
        env_manager: ConfigManager used for environment overrides

    Returns:
        Config with environment values applied over file values

    Raises:
        ValueError: If the file exists but its top level is not a mapping
        yaml.YAMLError: If the file is not valid YAML
    """
    raw: dict[str, Any] = {}
    if path:
        p = Path(path)
        if p.exists():
            raw = _load_yaml(p)
            logger.info("Loaded configuration from %s", p)
        else:
            logger.info("Config file %s not found; using defaults", p)

    manager = env_manager or ConfigManager()
    raw.update(manager.load_full_config())

    cfg = Config.from_dict(raw)
    logger.debug("Configuration values: %s", cfg)
    return cfg
