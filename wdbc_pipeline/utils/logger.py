"""Logging configuration for the diagnosis pipeline."""

import logging
import sys

_LEVEL = logging.INFO


def set_level(level: int) -> None:
    """Change the level of every pipeline logger created so far (and later)."""
    global _LEVEL
    _LEVEL = level
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith("wdbc_pipeline"):
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Create a configured logger instance."""
    if level is None:
        level = _LEVEL
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        fmt = logging.Formatter(
            "[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    return logger
