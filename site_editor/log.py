from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Route `site_editor` loggers to stderr at *level*.

    Safe to call more than once; the handler is replaced, not duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("site_editor")
    for handler in list(logger.handlers):
        if getattr(handler, "_site_editor", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._site_editor = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
