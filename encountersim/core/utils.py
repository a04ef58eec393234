"""
Utilities module for the simulator.

Provides common utility functions and helpers, including console printing
with rich formatting, progress bars and small numeric helpers shared by the
analysis layer.
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.rule import Rule

# Initialize the rich console.
_console = Console(markup=True, width=120, force_terminal=True, force_jupyter=False)


def cprint(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output.

    Args:
        *args: Arguments to pass to the console print function.
        **kwargs: Keyword arguments to pass to the console print function.

    """
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output with a rule.

    Args:
        *args: Arguments to pass to the Rule constructor.
        **kwargs: Keyword arguments to pass to the Rule constructor.

    """
    _console.print(Rule(*args, **kwargs))


def ccapture(content: Any) -> str:
    """
    Captures console output as a string.

    Args:
        content (Any): The content to capture.

    Returns:
        str: The captured output as a string.

    """
    with _console.capture() as capture:
        _console.print(content, markup=True, end="")
    return capture.get()


def make_bar(current: float, maximum: float, length: int = 10, color: str = "white") -> str:
    """
    Creates a visual progress bar representation.

    Args:
        current (float): The current value.
        maximum (float): The maximum value.
        length (int): The length of the bar in characters. Defaults to 10.
        color (str): The color for the filled portion. Defaults to "white".

    Returns:
        str: A formatted progress bar string.

    """
    if maximum <= 0:
        return "[dim white]" + "▯" * length + "[/]"
    # Compute the filled part of the bar.
    filled = max(0, min(length, int((current / maximum) * length)))
    # Compute the empty part of the bar.
    empty = length - filled
    bar = f"[{color}]" + "▮" * filled
    if empty > 0:
        bar += "[dim white]" + "▯" * empty + "[/]"
    bar += "[/]"
    return bar


def median(values: Sequence[float]) -> float:
    """
    Returns the median of a sequence, or 0.0 when it is empty.

    Args:
        values (Sequence[float]): The values.

    Returns:
        float: The median value.

    """
    if not values:
        return 0.0
    return float(statistics.median(values))


def mean(values: Sequence[float]) -> float:
    """Returns the arithmetic mean of a sequence, or 0.0 when it is empty."""
    if not values:
        return 0.0
    return float(statistics.fmean(values))


def std_dev(values: Sequence[float]) -> float:
    """Returns the population standard deviation of a sequence."""
    if len(values) < 2:
        return 0.0
    return float(statistics.pstdev(values))


def percentile_index(length: int, percent: float) -> int:
    """
    Maps a percentile to an index into a sorted sequence of the given length.

    Args:
        length (int): Length of the sorted sequence.
        percent (float): Percentile, between 0 and 100.

    Returns:
        int: The index, clamped to the valid range.

    """
    if length <= 0:
        return 0
    return max(0, min(length - 1, int(length * percent) // 100))


def bucket_bounds(length: int, buckets: int) -> list[tuple[int, int]]:
    """
    Splits a sequence into contiguous buckets whose sizes differ by at most one.

    Args:
        length (int): Length of the sequence.
        buckets (int): Number of buckets.

    Returns:
        list[tuple[int, int]]: Half-open (start, end) ranges, one per bucket.

    """
    return [
        ((i * length) // buckets, ((i + 1) * length) // buckets)
        for i in range(buckets)
    ]
