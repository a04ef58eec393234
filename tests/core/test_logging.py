"""
Tests for the logging setup.
"""

import logging

from rich.console import Console

from encountersim.core.logging import setup_logging


def test_setup_logging_writes_to_the_console():
    """Test that records end up on the console given to the setup."""
    console = Console(record=True, width=120)
    handler = setup_logging(logging.DEBUG, console=console)
    try:
        logging.getLogger("encountersim.tests").warning("Replay budget exhausted")
        assert "Replay budget exhausted" in console.export_text()
    finally:
        logging.getLogger().removeHandler(handler)
        logging.getLogger().setLevel(logging.WARNING)


def test_setup_logging_sets_the_level():
    """Test that the requested level is applied to the root logger."""
    handler = setup_logging(logging.WARNING, console=Console(record=True))
    try:
        assert logging.getLogger().level == logging.WARNING
        assert not logging.getLogger().isEnabledFor(logging.DEBUG)
    finally:
        logging.getLogger().removeHandler(handler)
