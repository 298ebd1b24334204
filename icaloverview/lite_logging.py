"""
Central logging configuration for icaloverview.

Quiets verbose third-party loggers while keeping icaloverview's own
diagnostics at the requested level.
"""

import logging
import os
from typing import Optional

TRUTHY = ("1", "true", "yes", "on")

# Third-party libraries that generate excessive debug logs
NOISY_LOGGERS: dict[str, int] = {
    "aiohttp.access": logging.WARNING,
    "aiohttp.server": logging.WARNING,
    "aiohttp.web": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
}


def debug_requested() -> bool:
    return os.getenv("ICALOVERVIEW_DEBUG", "").strip().lower() in TRUTHY


def configure_lite_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for icaloverview.

    Args:
        debug_mode: Whether to enable debug logging for icaloverview modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        ICALOVERVIEW_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        ICALOVERVIEW_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_log_level = os.getenv("ICALOVERVIEW_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    else:
        final_debug = debug_mode or debug_requested()

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s")
        )
        root_logger.addHandler(handler)

    for logger_name, level in NOISY_LOGGERS.items():
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger("icaloverview").setLevel(logging.DEBUG if final_debug else root_level)

    if final_debug:
        root_logger.debug("Debug logging enabled for icaloverview modules")
