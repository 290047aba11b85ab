"""Logging setup shared by the CLI and library code."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "cbt_author"


def configure_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    """
    Route the package logger through Rich.

    Calling this more than once replaces the handler instead of stacking them.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)
        console: Console to write to (stderr when omitted)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False
    return logger
