"""
Statistics module for the analysis layer.

Reduces a set of runs to percentile statistics. Runs are sorted by
ascending score (seed breaking ties) and split into ten deciles or five
quintiles of contiguous runs whose sizes differ by at most one. Each bucket
reports its win rate, survivors, hit points lost, duration and resource
timeline, and the whole distribution yields the vitals, the archetype and
the tiers of the encounter.
"""

from collections.abc import Sequence
from logging import debug

from encountersim.analysis.encounter_tier import (
    EncounterMetrics,
    contextual_tier,
    deaths_percentiles,
)
from encountersim.analysis.intensity import assess_intensity_tier, party_tdnw, snapshot_ehp
from encountersim.analysis.narrative import (
    analysis_summary,
    assess_archetype,
    encounter_label,
    is_good_design,
    pacing_label,
    star_rating,
    tuning_suggestions,
)
from encountersim.analysis.types import (
    DEFAULT_BALANCE,
    AggregateOutput,
    CombatantVisualization,
    DecileStats,
    GameBalance,
    QuintileStats,
    RunMetrics,
    Vitals,
)
from encountersim.core.constants import Team
from encountersim.core.utils import bucket_bounds, mean, median, percentile_index
from encountersim.effects.event_log import slice_events_for_encounter
from encountersim.simulation.results import EncounterResult, SimulationResult, SimulationRun
from encountersim.simulation.seed_selection import DECILE_PERCENTILES

DEATHS_DOOR_HP = 0.25

# ==============================================================================
# PER RUN
# ==============================================================================


def _encounters(result: SimulationResult, encounter_index: int | None) -> list[EncounterResult]:
    if encounter_index is None:
        return list(result.encounters)
    if 0 <= encounter_index < len(result.encounters):
        return [result.encounters[encounter_index]]
    return []


def run_metrics(
    result: SimulationResult,
    encounter_index: int | None = None,
    tdnw: float = 0.0,
) -> RunMetrics:
    """
    Computes the metrics of a run.

    Args:
        result (SimulationResult): The run.
        encounter_index (int | None): Restricts the metrics to one encounter.
        tdnw (float): The party's daily budget, used for the EHP timeline.

    Returns:
        RunMetrics: The metrics, empty if the run has no such encounter.

    """
    encounters = _encounters(result, encounter_index)
    if not encounters:
        return RunMetrics()

    def percent(ehp: float) -> float:
        return ehp / tdnw * 100.0 if tdnw > 0 else 0.0

    start = [c for c in encounters[0].initial if c.team == Team.PLAYERS]
    start_ehp = sum(snapshot_ehp(c) for c in start)
    timeline = [percent(start_ehp)]
    end_ehp = start_ehp
    hp_lost = 0.0
    for encounter in encounters:
        final = encounter.final_round
        end_ehp = sum(snapshot_ehp(c) for c in final.team1)
        timeline.append(percent(end_ehp))
        before = {c.id: c.state.current_hp for c in encounter.initial if c.team == Team.PLAYERS}
        for combatant in final.team1:
            hp_lost += max(0.0, before.get(combatant.id, 0.0) - combatant.state.current_hp)

    final = encounters[-1].final_round
    survivors = len(final.alive(Team.PLAYERS))
    return RunMetrics(
        burned=max(0.0, start_ehp - end_ehp),
        hp_lost=hp_lost,
        party_max_hp=sum(c.max_hp for c in start),
        survivors=survivors,
        deaths=len(final.team1) - survivors,
        duration=sum(encounter.rounds_fought for encounter in encounters),
        is_win=survivors > 0 and not final.alive(Team.MONSTERS),
        ehp_timeline=timeline,
    )


def median_run_visualization(
    result: SimulationResult,
    encounter_index: int | None = None,
) -> list[CombatantVisualization]:
    """Returns the end state of every combatant of the analysed encounter of a run."""
    encounters = _encounters(result, encounter_index)
    if not encounters:
        return []
    encounter = encounters[-1]
    start = {c.id: c.state.current_hp for c in encounter.initial}
    final = encounter.final_round
    return [
        CombatantVisualization(
            name=c.name,
            max_hp=c.max_hp,
            start_hp=start.get(c.id, c.max_hp),
            current_hp=c.state.current_hp,
            is_dead=not c.is_alive,
            is_player=c.team == Team.PLAYERS,
            hp_percentage=c.state.current_hp / c.max_hp * 100.0 if c.max_hp > 0 else 0.0,
        )
        for c in final.team1 + final.team2
    ]


# ==============================================================================
# BUCKETS
# ==============================================================================


def _sorted(
    results: Sequence[SimulationResult],
    encounter_index: int | None,
) -> list[SimulationResult]:
    if encounter_index is None:
        return sorted(results, key=lambda r: (r.score, r.seed))
    present = [r for r in results if encounter_index < len(r.encounters)]
    return sorted(present, key=lambda r: (r.encounters[encounter_index].score, r.seed))


def _bucket_fields(
    bucket: Sequence[SimulationResult],
    encounter_index: int | None,
    party_size: int,
    tdnw: float,
) -> dict:
    metrics = [run_metrics(result, encounter_index, tdnw) for result in bucket]
    steps = max((len(m.ehp_timeline) for m in metrics), default=0)
    timeline = [
        mean([m.ehp_timeline[step] for m in metrics if step < len(m.ehp_timeline)])
        for step in range(steps)
    ]
    party_max_hp = mean([m.party_max_hp for m in metrics])
    hp_lost = mean([m.hp_lost for m in metrics])
    typical = bucket[len(bucket) // 2]
    return {
        "runs": len(bucket),
        "median_survivors": median([m.survivors for m in metrics]),
        "party_size": party_size,
        "total_hp_lost": hp_lost,
        "hp_lost_percent": hp_lost / party_max_hp * 100.0 if party_max_hp > 0 else 0.0,
        "win_rate": sum(1 for m in metrics if m.is_win) / len(metrics) * 100.0,
        "battle_duration_rounds": mean([m.duration for m in metrics]),
        "resource_timeline": timeline,
        "median_seed": typical.seed,
        "median_run_visualization": median_run_visualization(typical, encounter_index),
    }


def _decile_label(decile: int) -> str:
    if decile == 1:
        return "Decile 1 (Worst)"
    if decile == 10:
        return "Decile 10 (Best)"
    return f"Decile {decile}"


def decile_stats(
    ordered: Sequence[SimulationResult],
    party_size: int,
    tdnw: float,
    encounter_index: int | None = None,
) -> list[DecileStats]:
    """
    Splits score-sorted runs into ten deciles.

    Args:
        ordered (Sequence[SimulationResult]): Runs sorted by ascending score.
        party_size (int): Players in the party.
        tdnw (float): The party's daily budget.
        encounter_index (int | None): Restricts the analysis to one encounter.

    Returns:
        list[DecileStats]: The non-empty deciles, worst first.

    """
    deciles = []
    for index, (start, end) in enumerate(bucket_bounds(len(ordered), 10)):
        if start == end:
            continue
        fields = _bucket_fields(ordered[start:end], encounter_index, party_size, tdnw)
        deciles.append(DecileStats(decile=index + 1, label=_decile_label(index + 1), **fields))
    return deciles


def run_quintile_analysis(
    results: Sequence[SimulationResult],
    party_size: int,
    short_rest_count: int = 0,
    encounter_index: int | None = None,
) -> list[QuintileStats]:
    """
    Splits runs into five quintiles.

    Args:
        results (Sequence[SimulationResult]): The runs, in any order.
        party_size (int): Players in the party.
        short_rest_count (int): Short rests in the timeline.
        encounter_index (int | None): Restricts the analysis to one encounter.

    Returns:
        list[QuintileStats]: The non-empty quintiles, worst first.

    """
    ordered = _sorted(results, encounter_index)
    if not ordered:
        return []
    tdnw = party_tdnw(_party(ordered[0]), short_rest_count)
    quintiles = []
    for index, (start, end) in enumerate(bucket_bounds(len(ordered), 5)):
        if start == end:
            continue
        fields = _bucket_fields(ordered[start:end], encounter_index, party_size, tdnw)
        quintiles.append(QuintileStats(quintile=index + 1, label=f"Quintile {index + 1}", **fields))
    return quintiles


# ==============================================================================
# VITALS
# ==============================================================================


def _party(result: SimulationResult) -> list:
    if not result.encounters:
        return []
    return [c for c in result.encounters[0].initial if c.team == Team.PLAYERS]


def calculate_vitals(
    ordered: Sequence[SimulationResult],
    party_size: int,
    tdnw: float,
    encounter_index: int | None = None,
    balance: GameBalance = DEFAULT_BALANCE,
) -> Vitals:
    """
    Computes the risk metrics of a distribution.

    Args:
        ordered (Sequence[SimulationResult]): Runs sorted by ascending score.
        party_size (int): Players in the party.
        tdnw (float): The party's daily budget.
        encounter_index (int | None): Restricts the analysis to one encounter.
        balance (GameBalance): The thresholds.

    Returns:
        Vitals: Lethality, TPK risk, attrition, volatility and archetype.

    """
    total = len(ordered)
    if total == 0:
        return Vitals(archetype=assess_archetype(Vitals(), balance))

    knocked_out = 0
    wiped = 0
    deaths_door_rounds = 0
    for result in ordered:
        run_ko = False
        run_wipe = False
        for encounter in _encounters(result, encounter_index):
            for snapshot in encounter.rounds:
                if any(
                    c.is_alive and c.state.current_hp < c.max_hp * DEATHS_DOOR_HP
                    for c in snapshot.team1
                ):
                    deaths_door_rounds += 1
            survivors = len(encounter.final_round.alive(Team.PLAYERS))
            run_ko = run_ko or survivors < party_size
            run_wipe = run_wipe or survivors == 0
        knocked_out += run_ko
        wiped += run_wipe

    def cost(index: int) -> float:
        if tdnw <= 0:
            return 0.0
        return run_metrics(ordered[min(index, total - 1)], encounter_index, tdnw).burned / tdnw

    attrition = cost(total // 2)
    volatility = max(0.0, cost(int(total * 0.1)) - attrition)
    vitals = Vitals(
        lethality_index=knocked_out / total,
        tpk_risk=wiped / total,
        attrition_score=attrition,
        volatility_index=volatility,
        doom_horizon=1.0 / attrition if attrition > 0.01 else 10.0,
        deaths_door_index=deaths_door_rounds / total,
        is_volatile=volatility > balance.is_volatile_threshold,
    )
    vitals.archetype = assess_archetype(vitals, balance)
    return vitals


# ==============================================================================
# AGGREGATE
# ==============================================================================


def run_decile_analysis(
    results: Sequence[SimulationResult],
    scenario_name: str,
    party_size: int,
    short_rest_count: int = 0,
    encounter_index: int | None = None,
    balance: GameBalance = DEFAULT_BALANCE,
) -> AggregateOutput:
    """
    Analyses a set of runs.

    Args:
        results (Sequence[SimulationResult]): The runs, in any order.
        scenario_name (str): Name of the scenario.
        party_size (int): Players in the party.
        short_rest_count (int): Short rests in the timeline.
        encounter_index (int | None): Restricts the analysis to one encounter.
        balance (GameBalance): The classification thresholds.

    Returns:
        AggregateOutput: Deciles, global median, vitals and classifications.

    """
    ordered = _sorted(results, encounter_index)
    if not ordered:
        return AggregateOutput(scenario_name=scenario_name, party_size=party_size)

    first = ordered[0]
    tdnw = party_tdnw(_party(first), short_rest_count)
    vitals = calculate_vitals(ordered, party_size, tdnw, encounter_index, balance)
    deciles = decile_stats(ordered, party_size, tdnw, encounter_index)
    median_run = ordered[len(ordered) // 2]
    global_median = DecileStats(
        decile=0,
        label="Global Median",
        **_bucket_fields([median_run], encounter_index, party_size, tdnw),
    )

    typical = run_metrics(median_run, encounter_index, tdnw)
    total_weight = sum(encounter.target_role.weight for encounter in first.encounters)
    if encounter_index is None:
        encounter_weight = total_weight
    else:
        encounter_weight = first.encounters[encounter_index].target_role.weight
    intensity = assess_intensity_tier(typical.burned, tdnw, total_weight, encounter_weight, balance)

    p1, p50, p99 = deaths_percentiles(
        [run_metrics(result, encounter_index, tdnw).deaths for result in ordered]
    )
    isolated = EncounterMetrics(
        deaths_p1=p1,
        deaths_p50=p50,
        deaths_p99=p99,
        resource_drain_percent=vitals.attrition_score * 100.0,
        party_size=party_size,
    ).classify()
    remaining = typical.ehp_timeline[0] if typical.ehp_timeline else 100.0
    tier = contextual_tier(isolated, remaining)
    debug(f"{scenario_name}: {vitals.archetype}, {intensity}, {tier} over {len(ordered)} runs")

    return AggregateOutput(
        scenario_name=scenario_name,
        total_runs=len(ordered),
        party_size=party_size,
        deciles=deciles,
        global_median=global_median,
        battle_duration_rounds=global_median.battle_duration_rounds,
        intensity_tier=intensity,
        encounter_tier=tier,
        encounter_label=encounter_label(vitals.archetype),
        analysis_summary=analysis_summary(vitals, global_median),
        pacing_label=pacing_label(vitals),
        tuning_suggestions=tuning_suggestions(vitals.archetype),
        is_good_design=is_good_design(vitals, balance),
        stars=star_rating(vitals, balance),
        tdnw=tdnw,
        num_encounters=len(first.encounters),
        vitals=vitals,
    )


def run_decile_analysis_with_logs(
    runs: Sequence[SimulationRun],
    scenario_name: str,
    party_size: int,
    short_rest_count: int = 0,
    balance: GameBalance = DEFAULT_BALANCE,
) -> AggregateOutput:
    """
    Same as run_decile_analysis, also keeping the event logs of the runs at
    P5, P15, P25, P35, P45, P50, P55, P65, P75, P85 and P95.
    """
    ordered = sorted(runs, key=lambda run: (run.result.score, run.result.seed))
    output = run_decile_analysis(
        [run.result for run in ordered],
        scenario_name,
        party_size,
        short_rest_count,
        balance=balance,
    )
    if ordered:
        output.decile_logs = [
            ordered[percentile_index(len(ordered), percent)].events
            for percent in DECILE_PERCENTILES
        ]
    return output


def run_encounter_analysis(
    runs: Sequence[SimulationRun],
    encounter_index: int,
    scenario_name: str,
    party_size: int,
    short_rest_count: int = 0,
    balance: GameBalance = DEFAULT_BALANCE,
) -> AggregateOutput:
    """
    Analyses one encounter of a set of runs.

    Runs are ranked by the score of that encounter, and the decile logs are
    sliced down to its events.

    Args:
        runs (Sequence[SimulationRun]): The runs with their event logs.
        encounter_index (int): Index of the encounter among the combats.
        scenario_name (str): Name of the scenario.
        party_size (int): Players in the party.
        short_rest_count (int): Short rests in the timeline.
        balance (GameBalance): The classification thresholds.

    Returns:
        AggregateOutput: The analysis of the encounter.

    """
    present = [run for run in runs if encounter_index < len(run.result.encounters)]
    ordered = sorted(
        present,
        key=lambda run: (run.result.encounters[encounter_index].score, run.result.seed),
    )
    output = run_decile_analysis(
        [run.result for run in ordered],
        f"{scenario_name} - Encounter {encounter_index + 1}",
        party_size,
        short_rest_count,
        encounter_index=encounter_index,
        balance=balance,
    )
    if ordered:
        output.decile_logs = [
            slice_events_for_encounter(
                ordered[percentile_index(len(ordered), percent)].events, encounter_index
            )
            for percent in DECILE_PERCENTILES
        ]
    return output
