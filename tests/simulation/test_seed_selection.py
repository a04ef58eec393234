"""
Tests for the stratified seed selection.
"""

import pytest

from encountersim.core.constants import InterestTier
from encountersim.core.utils import bucket_bounds
from encountersim.simulation.results import LightweightRun
from encountersim.simulation.seed_selection import (
    DECILE_PERCENTILES,
    bucket_median_seeds,
    decile_seeds,
    death_seeds,
    encounter_extreme_seeds,
    select_interesting_seeds_with_tiers,
)


def _run(seed: int, score: float, death_at: int | None = None) -> LightweightRun:
    return LightweightRun(
        seed=seed,
        encounter_scores=[score * 2, score],
        final_score=score,
        total_survivors=2 if death_at is None else 1,
        has_death=death_at is not None,
        first_death_encounter=death_at,
    )


@pytest.fixture
def survey() -> list[LightweightRun]:
    # Scores descend with the seed so that score order differs from seed order.
    return [_run(seed, 1000 - seed) for seed in range(1000)]


def test_decile_seeds(survey):
    """Test that deciles pick the runs at the expected score percentiles."""
    ordered = sorted(survey, key=lambda run: run.final_score)
    selected = decile_seeds(ordered)
    assert [s.label for s in selected] == [f"P{p}" for p in DECILE_PERCENTILES]
    assert all(s.tier == InterestTier.FULL for s in selected)
    # P5 of 1000 runs is the 50th lowest score, which belongs to seed 949.
    assert selected[0].seed == 949


def test_bucket_median_seeds(survey):
    """Test that every one-percent bucket yields its median run."""
    ordered = sorted(survey, key=lambda run: run.final_score)
    selected = bucket_median_seeds(ordered)
    assert len(selected) == 100
    assert selected[0].label == "P0-1"
    assert selected[-1].label == "P99-100"
    assert all(s.tier == InterestTier.LEAN for s in selected)


def test_bucket_median_seeds_small_survey():
    """Test that a survey smaller than the bucket count gets one bucket per run."""
    selected = bucket_median_seeds([_run(seed, seed) for seed in range(7)])
    assert [s.seed for s in selected] == list(range(7))


@pytest.mark.parametrize("length,buckets", [(1000, 100), (1003, 100), (57, 10), (5, 5)])
def test_bucket_bounds_sizes(length, buckets):
    """Test that bucket sizes differ by at most one and cover every run."""
    bounds = bucket_bounds(length, buckets)
    sizes = [end - start for start, end in bounds]
    assert sum(sizes) == length
    assert max(sizes) - min(sizes) <= 1
    assert bounds[0][0] == 0 and bounds[-1][1] == length


def test_death_seeds():
    """Test that every run with a death is labelled by its first fatal encounter."""
    runs = [_run(1, 10), _run(2, 5, death_at=1), _run(3, 1, death_at=0)]
    selected = death_seeds(runs)
    assert [(s.seed, s.label) for s in selected] == [(2, "DEATH-E1"), (3, "DEATH-E0")]
    assert all(s.tier == InterestTier.LEAN for s in selected)


def test_encounter_extreme_seeds():
    """Test that each encounter yields its worst, median and best run."""
    runs = [_run(seed, seed) for seed in range(10)]
    selected = encounter_extreme_seeds(runs)
    assert [s.label for s in selected] == [
        "E0-P0",
        "E0-P50",
        "E0-P100",
        "E1-P0",
        "E1-P50",
        "E1-P100",
    ]
    assert [s.seed for s in selected[:3]] == [0, 5, 9]
    assert all(s.tier == InterestTier.NONE for s in selected)


def test_selection_is_unique(survey):
    """Test that no seed is selected twice."""
    selected = select_interesting_seeds_with_tiers(survey)
    seeds = [s.seed for s in selected]
    assert len(seeds) == len(set(seeds))


def test_richest_tier_wins():
    """Test that a seed asked for by several strata keeps the richest tier."""
    runs = [_run(seed, seed, death_at=0 if seed == 5 else None) for seed in range(10)]
    selected = {s.seed: s for s in select_interesting_seeds_with_tiers(runs)}
    # Seed 5 is the median decile, a bucket median and a death.
    assert selected[5].tier == InterestTier.FULL
    assert selected[5].label == "P50"


def test_extremes_are_recorded_only():
    """Test that seeds picked only as encounter extremes are not replayed."""
    runs = [_run(seed, seed % 300) for seed in range(600)]
    selected = select_interesting_seeds_with_tiers(runs)
    tiers = {s.tier for s in selected}
    assert InterestTier.FULL in tiers and InterestTier.LEAN in tiers
    assert all(s.tier == InterestTier.NONE for s in selected if s.label.startswith("E"))


def test_empty_survey():
    """Test that an empty survey selects nothing."""
    assert select_interesting_seeds_with_tiers([]) == []
