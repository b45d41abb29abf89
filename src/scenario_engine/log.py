"""Log utilities."""

import logging

from rich.logging import RichHandler

from scenario_engine.config import settings


def get_logger(name: str) -> logging.Logger:
    """Retrieve logger with the provided name."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logger.handlers = [RichHandler(rich_tracebacks=True, show_path=False)]
    logger.propagate = False
    return logger
