"""
Module for printing analysis reports and event logs in a formatted way.
"""

from collections.abc import Sequence

from rich.padding import Padding
from rich.table import Table

from encountersim.analysis.types import AggregateOutput, DecileStats
from encountersim.core.utils import cprint, crule, make_bar
from encountersim.effects.event_system import (
    ActionSkipped,
    ActionStarted,
    AttackHit,
    AttackMissed,
    BuffApplied,
    BuffExpired,
    BuffRemoved,
    ConcentrationBroken,
    DamageTaken,
    EncounterEnded,
    EncounterStarted,
    Event,
    HealingApplied,
    RestTaken,
    RoundStarted,
    SaveResolved,
    TempHPGranted,
    TriggerFired,
    UnitDied,
)


def _decile_row(decile: DecileStats) -> list[str]:
    return [
        decile.label,
        str(decile.runs),
        f"{decile.win_rate:.1f}%",
        f"{decile.median_survivors:g}/{decile.party_size}",
        f"{decile.hp_lost_percent:.1f}%",
        f"{decile.battle_duration_rounds:.1f}",
        f"{decile.resource_timeline[-1]:.1f}%" if decile.resource_timeline else "-",
        str(decile.median_seed) if decile.median_seed is not None else "-",
    ]


def build_decile_table(output: AggregateOutput) -> Table:
    """
    Builds a table with one row per decile and a final row for the median run.

    Args:
        output (AggregateOutput): The analysis to display.

    Returns:
        Table: The rich table.

    """
    table = Table(title=output.scenario_name, show_lines=False)
    table.add_column("Decile", style="bold")
    table.add_column("Runs", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Survivors", justify="right")
    table.add_column("HP Lost", justify="right")
    table.add_column("Rounds", justify="right")
    table.add_column("EHP Left", justify="right")
    table.add_column("Median Seed", justify="right")
    for decile in output.deciles:
        table.add_row(*_decile_row(decile))
    if output.global_median is not None:
        table.add_row(*_decile_row(output.global_median), style="cyan")
    return table


def print_aggregate_report(output: AggregateOutput) -> None:
    """Prints the decile table followed by the vitals and classifications."""
    crule(f"[bold]{output.scenario_name}[/] ({output.total_runs} runs)")
    if not output.total_runs:
        cprint("No data.")
        return
    cprint(build_decile_table(output))
    vitals = output.vitals
    if vitals is not None:
        cprint(f"Archetype: {vitals.archetype.colorize(vitals.archetype.display_name)}")
        cprint(
            f"Lethality: {vitals.lethality_index:.1%}, "
            f"TPK risk: {vitals.tpk_risk:.1%}, "
            f"attrition: {vitals.attrition_score:.1%}, "
            f"volatility: {vitals.volatility_index:.1%}"
        )
        cprint(f"Doom horizon: {vitals.doom_horizon:.1f} encounters")
    cprint(f"Intensity: {output.intensity_tier.display_name}")
    if output.encounter_tier is not None:
        cprint(f"Encounter tier: {output.encounter_tier.display_name}")
    cprint(f"Label: {output.encounter_label.display_name} ({output.pacing_label})")
    cprint(f"Rating: {'*' * output.stars}")
    cprint(Padding(output.analysis_summary, (0, 2)))
    for suggestion in output.tuning_suggestions:
        cprint(Padding(f"[yellow]{suggestion}[/]", (0, 2)))
    if output.global_median is not None:
        for combatant in output.global_median.median_run_visualization:
            color = "green" if combatant.is_player else "red"
            bar = make_bar(combatant.current_hp, combatant.max_hp, color=color)
            cprint(
                Padding(
                    f"[{color}]{combatant.name}[/] {bar} "
                    f"{combatant.current_hp:g}/{combatant.max_hp:g}",
                    (0, 2),
                )
            )


def format_event(event: Event) -> str:
    """
    Formats an event as a human-readable line.

    Args:
        event (Event): The event.

    Returns:
        str: The formatted line, with rich markup.

    """
    if isinstance(event, EncounterStarted):
        return f"[bold]Encounter {event.encounter_index + 1} begins[/]"
    if isinstance(event, EncounterEnded):
        return (
            f"[bold]Encounter {event.encounter_index + 1} ends[/] after {event.rounds} rounds "
            f"({event.reason}), winner: {event.winner if event.winner is not None else 'none'}"
        )
    if isinstance(event, RoundStarted):
        return f"[bold]Round {event.round}[/]"
    if isinstance(event, RestTaken):
        return f"{', '.join(event.unit_ids)} take a {event.rest_type} rest"
    if isinstance(event, ActionStarted):
        targets = ", ".join(event.target_ids) or "nobody"
        return f"{event.actor_id} uses [blue]{event.action_name}[/] on {targets}"
    if isinstance(event, ActionSkipped):
        return f"{event.actor_id} does nothing: {event.reason}"
    if isinstance(event, AttackHit):
        crit = " [bold]critical[/]" if event.is_critical else ""
        return (
            f"{event.attacker_id} hits{crit} {event.target_id} "
            f"({event.attack_roll.total:g} vs AC {event.target_ac:g}) "
            f"for [red]{event.damage:g}[/]"
        )
    if isinstance(event, AttackMissed):
        return (
            f"{event.attacker_id} misses {event.target_id} "
            f"({event.attack_roll.total:g} vs AC {event.target_ac:g})"
        )
    if isinstance(event, SaveResolved):
        outcome = "saves" if event.succeeded else "fails"
        return (
            f"{event.target_id} {outcome} ({event.roll:g} vs DC {event.dc:g}), "
            f"takes [red]{event.damage:g}[/]"
        )
    if isinstance(event, DamageTaken):
        return f"{event.target_id} loses [red]{event.hp_lost:g}[/] HP"
    if isinstance(event, HealingApplied):
        return f"{event.target_id} heals [green]{event.amount:g}[/] HP"
    if isinstance(event, TempHPGranted):
        return f"{event.target_id} gains {event.amount:g} temporary HP"
    if isinstance(event, UnitDied):
        return f"[red]{event.unit_id} drops to 0 HP[/]"
    if isinstance(event, BuffApplied):
        return f"{event.target_id} gains {event.buff_id}"
    if isinstance(event, (BuffExpired, BuffRemoved)):
        return f"{event.buff_id} ends on {event.target_id}"
    if isinstance(event, ConcentrationBroken):
        return f"{event.caster_id} loses concentration on {event.buff_id} ({event.reason})"
    if isinstance(event, TriggerFired):
        return f"{event.owner_id} triggers {event.trigger_id} ({event.condition})"
    return str(event)


def print_event_log(events: Sequence[Event], padding: int = 2) -> None:
    """Prints an event log, one event per line."""
    for event in events:
        if isinstance(event, (EncounterStarted, EncounterEnded)):
            crule(format_event(event))
        elif isinstance(event, RoundStarted):
            cprint(format_event(event))
        else:
            cprint(Padding(format_event(event), (0, padding)))
