"""Logging setup shared by the services."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_HANDLER_NAME = "stockroom"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Attach one stream handler to the ``stockroom`` logger. Safe to call twice."""
    logger = logging.getLogger("stockroom")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    for h in logger.handlers:
        if h.get_name() == _HANDLER_NAME:
            h.setLevel(level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def reset_logging() -> None:
    logger = logging.getLogger("stockroom")
    for h in list(logger.handlers):
        if h.get_name() == _HANDLER_NAME:
            logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
