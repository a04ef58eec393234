"""
Damage module for the simulator.

Applies damage, healing and temporary hit points to combatants. Incoming
damage is absorbed by the ward first, then by temporary hit points, and
only the overflow reaches hit points, which never go below 0. Healing
clamps at maximum hit points and cannot revive a combatant at 0 HP.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from encountersim.character.combatant import Combatant
from encountersim.combat.battle_state import BattleState
from encountersim.core.constants import Ability
from encountersim.effects.event_system import (
    ConcentrationMaintained,
    DamageTaken,
    HealingApplied,
    TempHPGranted,
    UnitDied,
)


class DamageOutcome(BaseModel):
    """What happened when damage was applied."""

    target_id: str = Field(description="Combatant damaged.")
    damage: float = Field(description="Incoming damage.")
    ward_absorbed: float = Field(default=0, description="Absorbed by the ward.")
    temp_absorbed: float = Field(default=0, description="Absorbed by temporary HP.")
    hp_lost: float = Field(default=0, description="Hit points lost.")
    killed: bool = Field(default=False, description="Whether the hit dropped the target to 0 HP.")


def modify_damage(
    battle: BattleState,
    attacker: Combatant | None,
    target: Combatant,
    raw: float,
) -> float:
    """
    Applies outgoing and incoming damage modifiers.

    Args:
        battle (BattleState): The encounter.
        attacker (Combatant | None): The damage dealer, if any.
        target (Combatant): The damage receiver.
        raw (float): Damage before modifiers.

    Returns:
        float: Damage after multipliers and reduction, never below 0.

    """
    damage = raw
    if attacker is not None:
        damage *= attacker.buff_multiplier("damage_multiplier")
    damage *= target.buff_multiplier("damage_taken_multiplier")
    damage -= target.buff_total("damage_reduction", battle.rng)
    return float(max(0, math.floor(damage)))


def apply_damage(
    battle: BattleState,
    target: Combatant,
    amount: float,
    source_id: str | None,
) -> DamageOutcome:
    """
    Applies damage through the ward, then temporary HP, then HP.

    When the damage drops the target to 0 HP, the death is recorded and
    everything it was sustaining is cleaned up in the same call. Otherwise
    a concentrating target rolls to keep concentration.

    Args:
        battle (BattleState): The encounter.
        target (Combatant): The combatant damaged.
        amount (float): Damage after modifiers.
        source_id (str | None): The damage dealer, if any.

    Returns:
        DamageOutcome: How the damage was absorbed.

    """
    amount = max(0.0, amount)
    state = target.state
    was_alive = target.is_alive

    remaining = amount
    ward_absorbed = min(state.ward_hp, remaining)
    state.ward_hp -= ward_absorbed
    remaining -= ward_absorbed

    temp_absorbed = min(state.temp_hp, remaining)
    state.temp_hp -= temp_absorbed
    remaining -= temp_absorbed

    hp_lost = min(state.current_hp, remaining)
    state.current_hp = max(0.0, state.current_hp - remaining)

    battle.emit(
        DamageTaken,
        target_id=target.id,
        source_id=source_id,
        damage=amount,
        ward_absorbed=ward_absorbed,
        temp_absorbed=temp_absorbed,
        hp_lost=hp_lost,
    )
    target.stats.damage_taken += amount
    source = battle.find(source_id)
    if source is not None:
        source.stats.damage_dealt += amount

    killed = was_alive and not target.is_alive
    if killed:
        target.stats.times_unconscious += 1
        battle.emit(UnitDied, unit_id=target.id, killer_id=source_id)
        battle.effects.on_death(target)
    elif target.is_alive and amount > 0:
        check_concentration(battle, target, amount)

    return DamageOutcome(
        target_id=target.id,
        damage=amount,
        ward_absorbed=ward_absorbed,
        temp_absorbed=temp_absorbed,
        hp_lost=hp_lost,
        killed=killed,
    )


def check_concentration(battle: BattleState, target: Combatant, damage: float) -> None:
    """
    Rolls the constitution save a damaged caster needs to keep concentrating.

    Args:
        battle (BattleState): The encounter.
        target (Combatant): The damaged combatant.
        damage (float): The damage taken.

    """
    buff_id = target.state.concentrating_on
    if buff_id is None or not battle.config.concentration_checks:
        return
    dc = max(10.0, math.floor(damage / 2))
    roll, kept = battle.roll_save(target, Ability.CON, dc)
    if kept:
        battle.emit(ConcentrationMaintained, caster_id=target.id, buff_id=buff_id, dc=dc, roll=roll)
    else:
        battle.effects.break_concentration(target, "failed concentration save")


def apply_healing(
    battle: BattleState,
    target: Combatant,
    amount: float,
    healer_id: str | None,
) -> float:
    """
    Restores hit points, clamped at the maximum.

    Args:
        battle (BattleState): The encounter.
        target (Combatant): The combatant healed.
        amount (float): Healing rolled.
        healer_id (str | None): The healer, if any.

    Returns:
        float: Hit points actually restored, 0 for a dead target.

    """
    if not target.is_alive or amount <= 0:
        return 0.0
    before = target.state.current_hp
    target.state.current_hp = min(target.max_hp, before + amount)
    restored = target.state.current_hp - before
    battle.emit(HealingApplied, healer_id=healer_id, target_id=target.id, amount=restored)
    target.stats.healing_received += restored
    healer = battle.find(healer_id)
    if healer is not None:
        healer.stats.healing_given += restored
    return restored


def grant_temp_hp(
    battle: BattleState,
    target: Combatant,
    amount: float,
    source_id: str | None,
) -> float:
    """
    Grants temporary hit points; they do not stack, the larger pool is kept.

    Returns:
        float: The new temporary HP total, 0 for a dead target.

    """
    if not target.is_alive or amount <= 0:
        return 0.0
    target.state.temp_hp = max(target.state.temp_hp, amount)
    battle.emit(
        TempHPGranted, source_id=source_id, target_id=target.id, amount=target.state.temp_hp
    )
    return target.state.temp_hp
