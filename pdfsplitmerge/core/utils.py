"""Utilities shared by the pdfsplitmerge packages."""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "pdfsplitmerge"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def set_log_level(level: int) -> None:
    """Apply ``level`` to every ``pdfsplitmerge`` logger created so far."""

    logging.getLogger(LOGGER_NAME).setLevel(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith(LOGGER_NAME + ".") and isinstance(logger, logging.Logger):
            logger.setLevel(level)


def resolve_path(path: str | Path | None) -> Path:
    if path is None:
        raise ValueError("Path must not be None")
    resolved = Path(path).expanduser().resolve()
    return resolved
