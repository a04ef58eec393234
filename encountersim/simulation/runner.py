"""
Runner module for the simulator.

Walks a party through a timeline of encounters and short rests, carrying
hit points, temporary hit points, ward and resources from one step to the
next. Single runs come in two flavours sharing the same engine path: an
event-driven run that keeps its event log and round snapshots, and a
lightweight run that keeps neither. The survey pass fans lightweight runs
over consecutive seeds, optionally on a thread pool.
"""

from concurrent.futures import ThreadPoolExecutor
from logging import debug

from catchery import log_debug

from encountersim.character.character_resources import resource_key
from encountersim.character.combatant import Combatant, create_combatants
from encountersim.character.creature import Creature
from encountersim.combat.combat_manager import run_encounter
from encountersim.core.config import DEFAULT_CONFIG, SimulationConfig
from encountersim.core.constants import ResetType, ResourceKind, Team
from encountersim.core.context import RunCache, SimulationContext, scenario_hash
from encountersim.core.rng import DiceRng
from encountersim.effects.event_log import EventLog
from encountersim.effects.event_system import Event, ResourceConsumed, RestTaken
from encountersim.simulation.results import (
    EncounterResult,
    LightweightRun,
    SimulationResult,
    SimulationRun,
)
from encountersim.simulation.scoring import encounter_score
from encountersim.simulation.timeline import CombatStep, ShortRestStep, TimelineStep

# ==============================================================================
# SHORT REST
# ==============================================================================


def take_short_rest(party: list[Combatant], rng: DiceRng, log: EventLog) -> None:
    """
    Lets the party take a short rest.

    Short rest resources come back, unconscious members wake at 1 HP, and
    each member spends hit dice (largest first) as long as the average heal
    of a die does not overflow its maximum. Temporary hit points are lost
    and the ward is restored to its maximum.

    Args:
        party (list[Combatant]): The party.
        rng (DiceRng): The roller used for the hit dice.
        log (EventLog): The event log.

    """
    if log.enabled:
        log.record(RestTaken(rest_type="short", unit_ids=[member.id for member in party]))
    for member in party:
        state = member.state
        state.ledger.reset(ResetType.SHORT_REST)
        if state.current_hp <= 0:
            state.current_hp = 1.0
        con = member.creature.con_modifier
        for sides in sorted(member.creature.hit_dice_pool(), reverse=True):
            key = resource_key(ResourceKind.HIT_DICE, f"D{sides}")
            average = (sides + 1) / 2 + con
            while state.ledger.has(key) and state.current_hp + average <= member.max_hp:
                state.ledger.consume(key)
                if log.enabled:
                    log.record(ResourceConsumed(unit_id=member.id, resource=key, amount=1))
                healed = max(0.0, rng.roll(sides) + con)
                state.current_hp = min(member.max_hp, state.current_hp + healed)
        state.temp_hp = 0.0
        state.ward_hp = member.creature.max_arcane_ward_hp or 0.0
        debug(f"{member.name} rests to {state.current_hp:g}/{member.max_hp:g} HP")


# ==============================================================================
# SINGLE RUNS
# ==============================================================================


def _run_timeline(
    players: list[Creature],
    timeline: list[TimelineStep],
    context: SimulationContext,
    log: EventLog,
    capture_rounds: bool,
) -> SimulationResult:
    config = context.config
    party = create_combatants(players, Team.PLAYERS)
    encounters: list[EncounterResult] = []
    short_rests = 0
    for step in timeline:
        if isinstance(step, ShortRestStep):
            take_short_rest(party, context.rng, log)
            short_rests += 1
        elif isinstance(step, CombatStep):
            monsters = create_combatants(step.encounter.monsters, Team.MONSTERS)
            result = run_encounter(
                party,
                monsters,
                step.encounter,
                context.rng,
                log,
                config,
                encounter_index=len(encounters),
                capture_rounds=capture_rounds,
            )
            result.score = encounter_score(result.final_round, config.scoring_mode)
            encounters.append(result)
    return SimulationResult(
        encounters=encounters,
        score=encounters[-1].score if encounters else 0.0,
        seed=context.seed,
        short_rests=short_rests,
    )


def run_single_event_driven_simulation(
    players: list[Creature],
    timeline: list[TimelineStep],
    enable_logging: bool = True,
    *,
    seed: int | None = None,
    context: SimulationContext | None = None,
) -> tuple[SimulationResult, list[Event]]:
    """
    Runs a party through a timeline once.

    Args:
        players (list[Creature]): The party.
        timeline (list[TimelineStep]): Encounters and rests, in order.
        enable_logging (bool): Whether events and round snapshots are kept.
        seed (int | None): Seed of the run, random when None.
        context (SimulationContext | None): The run context. Takes
            precedence over ``seed``.

    Returns:
        tuple[SimulationResult, list[Event]]: The run and its event log
            (empty when logging is disabled).

    """
    context = context or SimulationContext(seed)
    log = EventLog(enabled=enable_logging)
    result = _run_timeline(players, timeline, context, log, capture_rounds=enable_logging)
    return result, log.to_list()


def run_single_lightweight_simulation(
    players: list[Creature],
    timeline: list[TimelineStep],
    seed: int | None = None,
    *,
    context: SimulationContext | None = None,
) -> LightweightRun:
    """Runs a party through a timeline once, keeping only the run summary."""
    context = context or SimulationContext(seed)
    result = _run_timeline(players, timeline, context, EventLog(enabled=False), False)
    return LightweightRun.from_result(result)


# ==============================================================================
# MANY RUNS
# ==============================================================================


def run_survey_pass(
    players: list[Creature],
    timeline: list[TimelineStep],
    iterations: int,
    base_seed: int | None = None,
    *,
    config: SimulationConfig | None = None,
    cache: RunCache | None = None,
) -> list[LightweightRun]:
    """
    Runs many lightweight simulations over consecutive seeds.

    Args:
        players (list[Creature]): The party.
        timeline (list[TimelineStep]): Encounters and rests, in order.
        iterations (int): Number of runs.
        base_seed (int | None): Seed of the first run. Defaults to 0.
        config (SimulationConfig | None): The configuration.
        cache (RunCache | None): Cache of runs already simulated.

    Returns:
        list[LightweightRun]: One summary per seed, in seed order.

    """
    config = config or DEFAULT_CONFIG
    base = base_seed or 0
    scenario = scenario_hash(players, timeline, config) if cache is not None else ""

    def survey(seed: int) -> LightweightRun:
        if cache is not None:
            cached = cache.get(scenario, seed)
            if cached is not None:
                return cached
        run = run_single_lightweight_simulation(
            players, timeline, context=SimulationContext(seed, config)
        )
        if cache is not None:
            cache.put(scenario, seed, run)
        return run

    seeds = range(base, base + iterations)
    if config.max_workers > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            runs = list(executor.map(survey, seeds))
    else:
        runs = [survey(seed) for seed in seeds]
    if cache is not None:
        log_debug(
            "Survey pass finished",
            {"iterations": iterations, "cache_hits": cache.hits, "cache_misses": cache.misses},
        )
    return runs


def run_monte_carlo(
    players: list[Creature],
    timeline: list[TimelineStep],
    iterations: int,
    seed: int | None = None,
    config: SimulationConfig | None = None,
) -> list[SimulationRun]:
    """
    Runs many event-driven simulations over consecutive seeds.

    Meant for small iteration counts; the two-pass sampler covers the rest.

    Args:
        players (list[Creature]): The party.
        timeline (list[TimelineStep]): Encounters and rests, in order.
        iterations (int): Number of runs.
        seed (int | None): Seed of the first run. Defaults to 0.
        config (SimulationConfig | None): The configuration.

    Returns:
        list[SimulationRun]: The runs with their event logs, in seed order.

    """
    config = config or DEFAULT_CONFIG
    base = seed or 0
    runs = []
    for offset in range(iterations):
        result, events = run_single_event_driven_simulation(
            players, timeline, context=SimulationContext(base + offset, config)
        )
        runs.append(SimulationRun(result=result, events=events))
    return runs
