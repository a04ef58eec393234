"""
Error handling module for the simulator.

Defines the exceptions raised by the simulation core. Recoverable anomalies
are not raised; they are logged through catchery and the offending action
or target is skipped.
"""

from typing import Any


class SimulationError(Exception):
    """Base class for every error raised by the simulator."""


class InsufficientResourceError(SimulationError):
    """Raised when a ledger is asked to consume more than it holds."""

    def __init__(self, key: str, requested: float, available: float) -> None:
        self.key = key
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient {key}: requested {requested}, available {available}"
        )


class CorruptedStateError(SimulationError):
    """Raised when the simulation reaches a state that cannot be represented."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.context = context or {}
        super().__init__(message)
