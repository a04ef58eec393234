"""
Tests for encounter risk tiers.
"""

import pytest

from encountersim.analysis.encounter_tier import (
    EncounterMetrics,
    contextual_tier,
    deaths_percentiles,
    depletion_penalty,
)
from encountersim.core.constants import EncounterTier


def _metrics(p1: int, p50: int, p99: int, drain: float, party: int = 4) -> EncounterMetrics:
    return EncounterMetrics(
        deaths_p1=p1,
        deaths_p50=p50,
        deaths_p99=p99,
        resource_drain_percent=drain,
        party_size=party,
    )


@pytest.mark.parametrize(
    "p1,p50,p99,drain,expected",
    [
        (0, 0, 0, 5, EncounterTier.TRIVIAL),
        (1, 0, 0, 20, EncounterTier.SAFE),
        (2, 1, 0, 40, EncounterTier.CHALLENGING),
        (3, 2, 1, 65, EncounterTier.BOSS),
        (4, 0, 0, 5, EncounterTier.FAILED),
        (0, 0, 0, 95, EncounterTier.FAILED),
    ],
)
def test_classify(p1, p50, p99, drain, expected):
    """Test that death percentiles and drain map to a tier."""
    assert _metrics(p1, p50, p99, drain).classify() == expected


def test_boundary_goes_to_the_safer_tier():
    """Test that a drain on the edge of two tiers picks the safer one."""
    assert _metrics(0, 0, 0, 10).classify() == EncounterTier.SAFE
    assert _metrics(0, 0, 0, 30).classify() == EncounterTier.SAFE


@pytest.mark.parametrize(
    "remaining,penalty",
    [(100, 0), (85, 0), (84.9, 1), (70, 1), (69, 2), (40, 2), (39.9, 3), (0, 3)],
)
def test_depletion_penalty(remaining, penalty):
    """Test the tier penalty for walking in depleted."""
    assert depletion_penalty(remaining) == penalty


def test_contextual_tier():
    """Test that depletion shifts the tier up, capped at FAILED."""
    assert contextual_tier(EncounterTier.SAFE, 90) == EncounterTier.SAFE
    assert contextual_tier(EncounterTier.SAFE, 50) == EncounterTier.BOSS
    assert contextual_tier(EncounterTier.BOSS, 10) == EncounterTier.FAILED


def test_deaths_percentiles():
    """Test that p1 is the worst run and p99 the best."""
    deaths = [0] * 90 + [1] * 8 + [4] * 2
    assert deaths_percentiles(deaths) == (4, 0, 0)
    assert deaths_percentiles([]) == (0, 0, 0)
    assert deaths_percentiles([2]) == (2, 2, 2)
