# HueCue Utils Logging

"""
Application-wide logging setup.

Modules get their logger with get_logger(__name__) and never attach
handlers themselves. setup_logging() configures the root logger once
(stdout, timestamped lines); calling it again only changes the level.
The level can come straight from config ("DEBUG", "info", ...).
"""

import logging
import sys
from typing import Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _coerce_level(level: Union[int, str]) -> int:
    """Map a level name or number to a logging level; unknown names -> INFO."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return int(level)


def setup_logging(name: str = "HueCue", level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure the root logger and return the named application logger.

    Args:
        name: Logger to return (and set to the same level).
        level: Level number or name.
    """
    level = _coerce_level(level)
    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        for handler in root.handlers:
            handler.setLevel(level)
            if handler.formatter is None:
                handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    app_logger = logging.getLogger(name)
    app_logger.setLevel(level)
    return app_logger


def get_logger(name: str = "HueCue") -> logging.Logger:
    return logging.getLogger(name)
