"""icaloverview - combined agenda, week and month views over several ICS feeds.

Imports are kept light so the package can be inspected without pulling in
the server's runtime dependencies.
"""

__version__ = "0.1.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream colorized output to the console.

    Honors ICALOVERVIEW_DEBUG (truthy values: "1", "true", "yes", "on"),
    which forces DEBUG verbosity.
    """
    import logging
    import sys

    from colorlog import ColoredFormatter

    from .lite_logging import debug_requested

    if debug_requested():
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler once to avoid duplicate output
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def run_server(args: Optional[object] = None) -> None:
    """Start the icaloverview server.

    Args:
        args: Optional namespace with ``port``, ``host`` and ``sources`` overrides
    """
    import logging
    import os

    _init_logging(os.environ.get("ICALOVERVIEW_LOG_LEVEL"))

    from .api.server import start_server
    from .core.config_manager import ConfigManager

    logger = logging.getLogger(__name__)
    cfg = ConfigManager().load_full_config()

    if args is not None:
        port = getattr(args, "port", None)
        if port is not None:
            cfg["server_port"] = int(port)
            logger.debug("Applied command line port override: %d", cfg["server_port"])
        host = getattr(args, "host", None)
        if host:
            cfg["server_bind"] = host
        sources = getattr(args, "sources", None)
        if sources:
            cfg["sources_file"] = sources

    logger.debug(
        "Resolved configuration (diagnostic): %s",
        {k: cfg.get(k) for k in ("sources_file", "server_bind", "server_port", "display_timezone")},
    )
    start_server(cfg)
