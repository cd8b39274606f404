"""Console logging for applications using LDC."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from ldc.config import get_settings


def setup_logging(level: int | str | None = None, console: Console | None = None) -> logging.Logger:
    """Attach a rich console handler to the ``ldc`` logger.

    Calling it again only updates the level.

    Args:
        level: Log level; defaults to ``logging.level`` from the settings.
        console: Optional rich console to render to (stderr by default).

    Returns:
        The ``ldc`` logger.
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger("ldc")
    logger.setLevel(level)
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return logger

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
