"""rss2ical - serve RSS 2.0 feeds as iCalendar documents.

The package keeps top-level imports light; the server and its dependencies
are imported when run_server() is called.
"""

__version__ = "1.0.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Honors RSS2ICAL_DEBUG (truthy values: "1", "true", "yes", "on"), which
    forces DEBUG verbosity regardless of the requested level.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    from .lite_logging import CorrelationIdFilter

    debug_env = os.environ.get("RSS2ICAL_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none are present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   [request-id] logger.name: message  (only the level is colorized)
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s [%(request_id)s] %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        handler.addFilter(CorrelationIdFilter())
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    logging.getLogger(__name__).debug("Logging initialized at level %s", logging.getLevelName(level))


def run_server(args: Optional[object] = None) -> None:
    """Start the rss2ical server.

    Args:
        args: Optional namespace with ``port``, ``config`` and ``debug`` attributes

    Configuration precedence is command line, then environment (and .env),
    then the YAML file named by ``args.config``, then built-in defaults.
    Blocks until the server shuts down.
    """
    import logging
    import os

    _init_logging(os.environ.get("RSS2ICAL_LOG_LEVEL"))
    logger = logging.getLogger(__name__)

    from .api.server import start_server
    from .config_loader import load_config

    cfg = load_config(getattr(args, "config", None))

    if args is not None:
        port = getattr(args, "port", None)
        if port is not None:
            try:
                cfg.server_port = int(port)
                logger.debug("Applied command line port override: %d", cfg.server_port)
            except (ValueError, TypeError) as e:
                logger.warning("Invalid port value from command line '%s': %s", port, e)
        if getattr(args, "debug", False):
            cfg.debug_logging = True
            cfg.log_level = "DEBUG"

    logger.info("Applying configured log_level=%s", cfg.log_level)
    logging.getLogger().setLevel(getattr(logging, cfg.log_level, logging.INFO))
    logger.debug(
        "Resolved configuration (diagnostic): %s",
        {k: getattr(cfg, k) for k in ("log_level", "server_bind", "server_port", "cache_max_entries")},
    )

    start_server(cfg)
