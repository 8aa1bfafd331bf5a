from __future__ import annotations

import logging

from . import config

LOG_FORMAT = "%(asctime)s - %(levelname)5s | %(name)s | %(message)s"


def setup_logger(name: str = "tikz_plotter", level_str: str = config.LOG_LEVEL) -> logging.Logger:
    """Attach a console handler to *name* and set its level.

    Safe to call repeatedly: a second call only updates the level.
    """
    log_level = getattr(logging, level_str.upper(), logging.WARNING)
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid duplicate console handlers on repeated setup
    handler = next((h for h in logger.handlers if isinstance(h, logging.StreamHandler)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    handler.setLevel(log_level)
    return logger
