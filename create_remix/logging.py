"""Logging utilities for create-remix."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = 'create_remix'


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the create_remix hierarchy."""
    full_name = f'{_LOGGER_NAME}.{name}' if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Configure the create_remix logger to write to stderr through rich.

    Args:
        verbose (bool): Log debug messages instead of warnings only.

    Returns:
        logging.Logger: The configured package logger.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # reset handlers so repeated invocations do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_time=False,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(handler)

    return logger


__all__ = ['configure_logging', 'get_logger']
