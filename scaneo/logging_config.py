"""Logging setup for scaneo.

Modules obtain their logger through :func:`get_logger` and never configure
handlers themselves; the CLI calls :func:`setup_logging` once.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "scaneo"


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the ``scaneo`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Configured logger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: int = logging.WARNING, console: Optional[Console] = None
) -> logging.Logger:
    """Install a rich handler on the package logger.

    Calling it again replaces the previous handler, so the level can be
    changed between runs in the same process.

    Args:
        level: Logging level for the package logger.
        console: Console to log to (defaults to stderr).

    Returns:
        The package root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
