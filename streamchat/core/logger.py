"""
Application logger setup.
"""

import logging
import sys

from streamchat.core.config import get_settings

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str, level: int | None = None) -> logging.Logger:
    """Create (or fetch) a logger with a single stdout handler."""
    log = logging.getLogger(name)
    if level is None:
        level = logging.DEBUG if get_settings().DEBUG else logging.INFO
    log.setLevel(level)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        log.addHandler(handler)
        log.propagate = False

    return log


logger = setup_logger("streamchat")
