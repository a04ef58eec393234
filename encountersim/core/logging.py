"""
Logging configuration module for the encounter simulator.

Library code only emits records; nothing is shown until an application
calls setup_logging, which routes both the stdlib loggers and catchery
through a rich handler.
"""

import logging

from catchery import setup_catchery_logging
from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int = logging.INFO, console: Console | None = None) -> RichHandler:
    """
    Sets up logging with rich colored output.

    Args:
        level (int): The logging level to set. Defaults to logging.INFO.
        console (Console | None): Console the records are written to, a
            fresh terminal console when None.

    Returns:
        RichHandler: The installed handler.

    """
    if console is None:
        console = Console(width=120, force_terminal=True, force_jupyter=False)

    handler = RichHandler(
        console=console,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s", datefmt="[%X]"))

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    # catchery keeps its own error history; route it through the same level.
    setup_catchery_logging(level=level)
    return handler

