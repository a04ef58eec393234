"""
Tests for the two-pass sampler.
"""

from encountersim.core.config import SimulationConfig
from encountersim.core.constants import InterestTier
from encountersim.simulation.results import LightweightRun, SimulationResult, SimulationRun
from encountersim.simulation.two_pass import (
    run_two_pass_simulation,
    score_percentiles,
    verify_replay,
)


def _lightweight(seed: int, score: float, survivors: int = 2) -> LightweightRun:
    return LightweightRun(
        seed=seed,
        final_score=score,
        total_survivors=survivors,
        has_death=False,
    )


def test_two_pass_is_reproducible(skirmish):
    """Test that every replay matches its survey run."""
    players, timeline = skirmish
    summary = run_two_pass_simulation(players, timeline, 120, seed=7)
    assert summary.is_reproducible
    assert len(summary.survey) == 120
    assert not summary.lightweight_only


def test_replays_follow_the_tiers(skirmish):
    """Test that full and lean seeds are replayed and extremes are not."""
    players, timeline = skirmish
    summary = run_two_pass_simulation(players, timeline, 150)
    replayed = {replay.result.seed for replay in summary.replays}
    for choice in summary.selected:
        assert (choice.seed in replayed) == (choice.tier != InterestTier.NONE)
    full = [c.seed for c in summary.selected if c.tier == InterestTier.FULL]
    # Full replays come first and keep their event log.
    assert [replay.result.seed for replay in summary.replays[: len(full)]] == full
    assert all(replay.events for replay in summary.replays[: len(full)])


def test_lean_replays_degrade_above_the_detail_limit(skirmish):
    """Test that lean replays lose their log when the survey is large."""
    players, timeline = skirmish
    config = SimulationConfig(full_detail_iteration_limit=50)
    summary = run_two_pass_simulation(players, timeline, 100, config=config)
    full = {c.seed for c in summary.selected if c.tier == InterestTier.FULL}
    assert summary.lightweight_only
    assert summary.is_reproducible
    for replay in summary.replays:
        assert bool(replay.events) == (replay.result.seed in full)


def test_replay_budget(skirmish):
    """Test that no more logged replays are made than the budget allows."""
    players, timeline = skirmish
    summary = run_two_pass_simulation(
        players, timeline, 60, config=SimulationConfig(max_full_replays=3)
    )
    assert sum(1 for replay in summary.replays if replay.events) == 3
    assert summary.lightweight_only
    assert summary.is_reproducible


def test_no_logged_replays(skirmish):
    """Test that a zero replay budget still replays and verifies every seed."""
    players, timeline = skirmish
    summary = run_two_pass_simulation(
        players, timeline, 40, config=SimulationConfig(max_full_replays=0)
    )
    assert summary.lightweight_only
    assert summary.replays
    assert all(not replay.events for replay in summary.replays)
    assert summary.is_reproducible


def test_score_percentiles():
    """Test the summary of a score distribution."""
    runs = [_lightweight(seed, score) for seed, score in enumerate([4, 1, 3, 2, 5])]
    percentiles = score_percentiles(runs)
    assert percentiles.min == 1
    assert percentiles.max == 5
    assert percentiles.median == 3
    assert percentiles.mean == 3
    assert percentiles.p25 == 2
    assert percentiles.p75 == 4


def test_score_percentiles_empty():
    """Test that an empty survey has an all-zero distribution."""
    assert score_percentiles([]).max == 0


def test_verify_replay():
    """Test that a replay is compared on score and survivors."""
    survey = _lightweight(3, 100.0)
    matching = SimulationRun(result=SimulationResult(score=100.0, seed=3))
    diverging = SimulationRun(result=SimulationResult(score=90.0, seed=3))
    # A result without encounters has no survivors.
    assert verify_replay(_lightweight(3, 100.0, survivors=0), matching, 1e-10) is None
    mismatch = verify_replay(survey, diverging, 1e-10)
    assert mismatch is not None
    assert mismatch.survey_score == 100.0
    assert mismatch.replay_score == 90.0
    assert mismatch.survey_survivors == 2
    assert mismatch.replay_survivors == 0
