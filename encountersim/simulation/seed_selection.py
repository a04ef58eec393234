"""
Seed selection module for the simulator.

Picks, from the lightweight runs of a survey, the small stratified set of
seeds worth replaying. Global deciles are replayed with full event logs,
the medians of the one-percent score buckets and every run where a player
dropped are replayed lean, and the per-encounter extremes are only
recorded. Every seed is selected once, at the richest tier that asked for
it.
"""

from collections.abc import Sequence

from encountersim.core.constants import InterestTier
from encountersim.core.utils import bucket_bounds, percentile_index
from encountersim.simulation.results import LightweightRun, SelectedSeed

DECILE_PERCENTILES = (5, 15, 25, 35, 45, 50, 55, 65, 75, 85, 95)
ENCOUNTER_PERCENTILES = (0, 50, 100)
SCORE_BUCKETS = 100


def _sorted_by_score(runs: Sequence[LightweightRun]) -> list[LightweightRun]:
    return sorted(runs, key=lambda run: (run.final_score, run.seed))


def decile_seeds(ordered: Sequence[LightweightRun]) -> list[SelectedSeed]:
    """Selects the runs at the global score deciles."""
    return [
        SelectedSeed(
            seed=ordered[percentile_index(len(ordered), percent)].seed,
            tier=InterestTier.FULL,
            label=f"P{percent}",
        )
        for percent in DECILE_PERCENTILES
    ]


def bucket_median_seeds(ordered: Sequence[LightweightRun]) -> list[SelectedSeed]:
    """Selects the median run of every one-percent score bucket."""
    buckets = min(SCORE_BUCKETS, len(ordered))
    selected = []
    for index, (start, end) in enumerate(bucket_bounds(len(ordered), buckets)):
        if start == end:
            continue
        selected.append(
            SelectedSeed(
                seed=ordered[start + (end - start) // 2].seed,
                tier=InterestTier.LEAN,
                label=f"P{index}-{index + 1}",
            )
        )
    return selected


def death_seeds(runs: Sequence[LightweightRun]) -> list[SelectedSeed]:
    """Selects every run where a player ended an encounter at 0 HP."""
    return [
        SelectedSeed(
            seed=run.seed,
            tier=InterestTier.LEAN,
            label=f"DEATH-E{run.first_death_encounter}",
        )
        for run in runs
        if run.has_death
    ]


def encounter_extreme_seeds(runs: Sequence[LightweightRun]) -> list[SelectedSeed]:
    """Selects the worst, median and best run of every encounter."""
    encounters = max((len(run.encounter_scores) for run in runs), default=0)
    selected = []
    for encounter in range(encounters):
        ordered = sorted(
            (run for run in runs if len(run.encounter_scores) > encounter),
            key=lambda run: (run.encounter_scores[encounter], run.seed),
        )
        for percent in ENCOUNTER_PERCENTILES:
            selected.append(
                SelectedSeed(
                    seed=ordered[percentile_index(len(ordered), percent)].seed,
                    tier=InterestTier.NONE,
                    label=f"E{encounter}-P{percent}",
                )
            )
    return selected


def select_interesting_seeds_with_tiers(runs: Sequence[LightweightRun]) -> list[SelectedSeed]:
    """
    Selects the seeds worth replaying from a survey.

    Args:
        runs (Sequence[LightweightRun]): The survey, in any order.

    Returns:
        list[SelectedSeed]: Unique seeds, deciles first, then bucket
            medians, deaths and encounter extremes.

    """
    if not runs:
        return []
    ordered = _sorted_by_score(runs)
    candidates = (
        decile_seeds(ordered)
        + bucket_median_seeds(ordered)
        + death_seeds(ordered)
        + encounter_extreme_seeds(ordered)
    )
    seen: set[int] = set()
    selected = []
    for candidate in candidates:
        if candidate.seed in seen:
            continue
        seen.add(candidate.seed)
        selected.append(candidate)
    return selected
