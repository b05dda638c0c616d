"""Logging setup for QuantPilot.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
``setup_logging`` once so records render through rich alongside the
rest of the console output.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "WARNING", console: Optional[Console] = None) -> None:
    """Route the ``quantpilot`` logger hierarchy through a RichHandler.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...).
        console: Console to render into. rich's stderr console if omitted.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("quantpilot")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False
