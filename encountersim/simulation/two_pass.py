"""
Two-pass module for the simulator.

Large iteration counts are sampled in two passes. The survey pass runs
every seed without event logs and keeps only lightweight summaries; the
seed selector then picks a bounded set of interesting seeds, and the
replay pass re-runs those seeds with event logs. Since every run is a pure
function of its seed, each replay must reproduce the score and survivor
count of its survey run, and any divergence is recorded.
"""

from collections.abc import Sequence

from catchery import log_error, log_warning

from encountersim.character.creature import Creature
from encountersim.core.config import DEFAULT_CONFIG, SimulationConfig
from encountersim.core.constants import InterestTier
from encountersim.core.context import RunCache, SimulationContext
from encountersim.core.utils import mean, median, percentile_index, std_dev
from encountersim.simulation.results import (
    LightweightRun,
    ReproducibilityMismatch,
    ScorePercentiles,
    SelectedSeed,
    SimulationRun,
    TwoPassSummary,
)
from encountersim.simulation.runner import run_single_event_driven_simulation, run_survey_pass
from encountersim.simulation.seed_selection import select_interesting_seeds_with_tiers
from encountersim.simulation.timeline import TimelineStep


def score_percentiles(runs: Sequence[LightweightRun]) -> ScorePercentiles:
    """
    Summarizes the score distribution of a survey.

    Args:
        runs (Sequence[LightweightRun]): The survey.

    Returns:
        ScorePercentiles: Extremes, quartiles, median, mean and standard deviation.

    """
    scores = sorted(run.final_score for run in runs)
    if not scores:
        return ScorePercentiles()
    return ScorePercentiles(
        min=scores[0],
        p25=scores[percentile_index(len(scores), 25)],
        median=median(scores),
        p75=scores[percentile_index(len(scores), 75)],
        max=scores[-1],
        mean=mean(scores),
        std_dev=std_dev(scores),
    )


def verify_replay(
    survey: LightweightRun,
    replay: SimulationRun,
    tolerance: float,
) -> ReproducibilityMismatch | None:
    """
    Compares a replay with the survey run of the same seed.

    Args:
        survey (LightweightRun): The survey run.
        replay (SimulationRun): The replay.
        tolerance (float): Largest score difference accepted.

    Returns:
        ReproducibilityMismatch | None: The mismatch, None if the runs agree.

    """
    result = replay.result
    if (
        abs(result.score - survey.final_score) <= tolerance
        and result.survivors() == survey.total_survivors
    ):
        return None
    return ReproducibilityMismatch(
        seed=survey.seed,
        survey_score=survey.final_score,
        replay_score=result.score,
        survey_survivors=survey.total_survivors,
        replay_survivors=result.survivors(),
    )


def _replay_order(selected: Sequence[SelectedSeed]) -> list[SelectedSeed]:
    """Full tier first, then lean, so the replay budget goes to the deciles."""
    full = [seed for seed in selected if seed.tier == InterestTier.FULL]
    lean = [seed for seed in selected if seed.tier == InterestTier.LEAN]
    return full + lean


def run_two_pass_simulation(
    players: list[Creature],
    timeline: list[TimelineStep],
    iterations: int,
    seed: int | None = None,
    config: SimulationConfig | None = None,
) -> TwoPassSummary:
    """
    Surveys many seeds, then replays the interesting ones with event logs.

    Lean replays lose their event log once ``max_full_replays`` logged
    replays have been made, or straight away when the iteration count is
    above ``full_detail_iteration_limit``. Seeds of the no-detail tier are
    not replayed.

    Args:
        players (list[Creature]): The party.
        timeline (list[TimelineStep]): Encounters and rests, in order.
        iterations (int): Number of survey runs.
        seed (int | None): Seed of the first run. Defaults to 0.
        config (SimulationConfig | None): The configuration.

    Returns:
        TwoPassSummary: Survey, selection, replays and the reproducibility check.

    """
    config = config or DEFAULT_CONFIG
    cache = RunCache(config.cache_capacity)
    survey = run_survey_pass(players, timeline, iterations, seed, config=config, cache=cache)
    by_seed = {run.seed: run for run in survey}
    selected = select_interesting_seeds_with_tiers(survey)

    lean_logged = iterations <= config.full_detail_iteration_limit
    if not lean_logged:
        log_warning(
            "Iteration count above the full detail limit, lean replays run without event logs",
            {"iterations": iterations, "limit": config.full_detail_iteration_limit},
        )
    degraded = not lean_logged
    logged_replays = 0
    replays: list[SimulationRun] = []
    mismatches: list[ReproducibilityMismatch] = []
    for choice in _replay_order(selected):
        enable_logging = choice.tier == InterestTier.FULL or lean_logged
        if enable_logging and logged_replays >= config.max_full_replays:
            if not degraded:
                log_warning(
                    "Replay budget exhausted, remaining replays run without event logs",
                    {"budget": config.max_full_replays, "selected": len(selected)},
                )
            degraded = True
            enable_logging = False
        result, events = run_single_event_driven_simulation(
            players,
            timeline,
            enable_logging,
            context=SimulationContext(choice.seed, config),
        )
        if enable_logging:
            logged_replays += 1
        replay = SimulationRun(result=result, events=events)
        replays.append(replay)
        mismatch = verify_replay(by_seed[choice.seed], replay, config.reproducibility_tolerance)
        if mismatch is not None:
            log_error(
                "Replay diverged from its survey run",
                mismatch.model_dump(),
            )
            mismatches.append(mismatch)

    return TwoPassSummary(
        iterations=iterations,
        survey=survey,
        selected=selected,
        replays=replays,
        percentiles=score_percentiles(survey),
        mismatches=mismatches,
        lightweight_only=degraded,
    )
