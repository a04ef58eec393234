"""
Intensity module for the analysis layer.

Measures how much of the party's adventuring day an encounter costs. Hit
points and every limited resource are converted to effective hit points
(EHP) using the same weights as the resource ledger; the daily budget of a
party (TDNW, total daily net worth) is the EHP of its full ledgers plus the
short rest resources it gets back over the day.
"""

from collections.abc import Iterable

from encountersim.analysis.types import DEFAULT_BALANCE, GameBalance
from encountersim.character.character_resources import (
    HP_WEIGHT,
    ResourceSnapshot,
    resource_weight,
)
from encountersim.character.combatant import CombatantSnapshot
from encountersim.character.creature import Creature
from encountersim.core.constants import IntensityTier, ResetType


def resources_ehp(resources: dict[str, ResourceSnapshot], use_max: bool = False) -> float:
    """
    Converts ledger entries to effective hit points.

    Args:
        resources (dict[str, ResourceSnapshot]): The ledger entries.
        use_max (bool): Whether to value the capacity instead of what is left.

    Returns:
        float: The EHP value.

    """
    total = 0.0
    for key, entry in resources.items():
        amount = entry.max if use_max else entry.current
        if not amount or amount <= 0:
            continue
        total += amount * resource_weight(key, entry.reset)
    return total


def snapshot_ehp(snapshot: CombatantSnapshot) -> float:
    """Returns the EHP a combatant has left in a snapshot."""
    state = snapshot.state
    return (state.current_hp + state.temp_hp) * HP_WEIGHT + resources_ehp(state.resources)


def _budget(max_hp: float, resources: dict[str, ResourceSnapshot], short_rests: int) -> float:
    refills = sum(
        (entry.max or 0.0) * resource_weight(key, entry.reset)
        for key, entry in resources.items()
        if entry.reset == ResetType.SHORT_REST
    )
    return max_hp * HP_WEIGHT + resources_ehp(resources, use_max=True) + short_rests * refills


def daily_budget(snapshot: CombatantSnapshot, short_rests: int = 0) -> float:
    """
    Returns the EHP a combatant can spend over an adventuring day.

    Args:
        snapshot (CombatantSnapshot): Any snapshot of the combatant.
        short_rests (int): Short rests taken during the day.

    Returns:
        float: The daily budget.

    """
    return _budget(snapshot.max_hp, snapshot.state.resources, short_rests)


def creature_daily_budget(creature: Creature, short_rests: int = 0) -> float:
    """Same as daily_budget, from a creature definition (per instance)."""
    return _budget(creature.hp, creature.initialize_ledger().snapshot(), short_rests)


def party_tdnw(party: Iterable[CombatantSnapshot], short_rests: int = 0) -> float:
    """Returns the total daily net worth of a party from its snapshots."""
    return sum(daily_budget(snapshot, short_rests) for snapshot in party)


def creatures_tdnw(players: Iterable[Creature], short_rests: int = 0) -> float:
    """Returns the total daily net worth of a party before it is simulated."""
    return sum(creature_daily_budget(p, short_rests) * p.count for p in players)


def assess_intensity_tier(
    burned: float,
    tdnw: float,
    total_weight: float,
    encounter_weight: float,
    balance: GameBalance = DEFAULT_BALANCE,
) -> IntensityTier:
    """
    Grades the cost of an encounter against its share of the daily budget.

    Args:
        burned (float): EHP burned in the typical run.
        tdnw (float): The party's daily budget.
        total_weight (float): Sum of the target role weights of the day.
        encounter_weight (float): Target role weight of the encounter.
        balance (GameBalance): The thresholds.

    Returns:
        IntensityTier: TIER1 for a fraction of the intended cost, TIER5 for
            twice the intended cost or more.

    """
    if tdnw <= 0:
        return IntensityTier.TIER1
    cost = burned / tdnw
    target = encounter_weight / (total_weight if total_weight > 0 else 1.0)
    if cost < balance.intensity_tier1_multiplier * target:
        return IntensityTier.TIER1
    if cost < balance.intensity_tier2_multiplier * target:
        return IntensityTier.TIER2
    if cost < balance.intensity_tier3_multiplier * target:
        return IntensityTier.TIER3
    if cost < balance.intensity_tier4_multiplier * target:
        return IntensityTier.TIER4
    return IntensityTier.TIER5
