"""
Tests for the console and numeric helpers.
"""

import pytest
from rich.text import Text

from encountersim.core.utils import (
    bucket_bounds,
    ccapture,
    make_bar,
    mean,
    median,
    percentile_index,
    std_dev,
)


def test_make_bar():
    """Test that the bar fills in proportion to the value."""
    assert make_bar(5, 10, length=4, color="green") == "[green]▮▮[dim white]▯▯[/][/]"
    assert make_bar(10, 10, length=3) == "[white]▮▮▮[/]"
    assert make_bar(3, 0, length=2) == "[dim white]▯▯[/]"


def test_ccapture_strips_markup():
    """Test that captured output holds the text without markup."""
    captured = Text.from_ansi(ccapture("[bold]Round 3[/]")).plain
    assert captured.strip() == "Round 3"


def test_median_and_mean():
    """Test the central tendencies, including the empty case."""
    assert median([3, 1, 2]) == 2
    assert median([4, 1, 3, 2]) == 2.5
    assert median([]) == 0.0
    assert mean([1, 2, 3, 6]) == 3
    assert mean([]) == 0.0


def test_std_dev():
    """Test the population standard deviation."""
    assert std_dev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert std_dev([5]) == 0.0


def test_numeric_helpers_on_fractions():
    """Test the helpers on fractional values, as produced by survey scores."""
    scores = [0.25, 0.5, 0.75, 1.0]
    assert median(scores) == pytest.approx(0.625)
    assert mean(scores) == pytest.approx(0.625)
    assert std_dev([0.5, 1.5]) == pytest.approx(0.5)
    assert isinstance(median([1, 2, 3]), float)


@pytest.mark.parametrize(
    "length,percent,index",
    [(100, 50, 50), (100, 5, 5), (10, 100, 9), (7, 0, 0), (0, 50, 0)],
)
def test_percentile_index(length, percent, index):
    """Test that percentiles map to clamped indices."""
    assert percentile_index(length, percent) == index


def test_bucket_bounds_are_contiguous():
    """Test that each bucket starts where the previous one ends."""
    bounds = bucket_bounds(23, 5)
    assert all(bounds[i][1] == bounds[i + 1][0] for i in range(len(bounds) - 1))
