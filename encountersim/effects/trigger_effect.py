"""
Trigger effect module for the simulator.

Fires the triggers owned by a combatant, either innate or granted by one of
its buffs, when a combat condition happens: a hit, a miss, being damaged,
an ally or enemy dropping, an enemy starting an action, and so on. Reactions
can deal damage, heal, apply or remove buffs, restore resources, or
interrupt the action being resolved.
"""

from __future__ import annotations

from logging import debug
from typing import TYPE_CHECKING

from encountersim.character.character_resources import resource_key
from encountersim.character.combatant import Combatant
from encountersim.combat.battle_state import BattleState
from encountersim.combat.damage import (
    DamageOutcome,
    apply_damage,
    apply_healing,
    modify_damage,
)
from encountersim.core.constants import ResourceKind, TriggerCondition, TriggerEffectKind
from encountersim.core.dice_parser import roll_formula
from encountersim.effects.buff import TriggerDefinition
from encountersim.effects.event_system import (
    ActionInterrupted,
    ResourceConsumed,
    ResourceRestored,
    TriggerFired,
)

if TYPE_CHECKING:
    from encountersim.actions import BaseAction

# Reactions may cause further reactions, but only this many levels deep.
MAX_TRIGGER_DEPTH = 2

REACTION_KEY = resource_key(ResourceKind.REACTION)


def _can_fire(
    owner: Combatant,
    trigger: TriggerDefinition,
    action: BaseAction | None,
) -> bool:
    if not owner.is_alive:
        return False
    if trigger.costs_reaction:
        if owner.is_incapacitated or not owner.state.ledger.has(REACTION_KEY):
            return False
    if trigger.uses_per_encounter is not None:
        if owner.state.trigger_uses.get(trigger.id, 0) >= trigger.uses_per_encounter:
            return False
    if trigger.hp_below_percent is not None:
        if owner.hp >= owner.max_hp * trigger.hp_below_percent:
            return False
    if trigger.required_tags:
        if action is None or not all(tag in action.tags for tag in trigger.required_tags):
            return False
    return True


def fire_triggers(
    battle: BattleState,
    owner: Combatant,
    condition: TriggerCondition,
    other: Combatant | None = None,
    action: BaseAction | None = None,
    depth: int = 0,
) -> bool:
    """
    Fires every trigger of a combatant matching a condition.

    Args:
        battle (BattleState): The encounter.
        owner (Combatant): The combatant owning the triggers.
        condition (TriggerCondition): The condition that happened.
        other (Combatant | None): The other party of the condition, such as
            the attacker for ON_BEING_ATTACKED. Effects that are not
            ``on_self`` apply to it.
        action (BaseAction | None): The action involved, matched against
            the trigger's required tags.
        depth (int): Reaction nesting level.

    Returns:
        bool: True if at least one trigger fired.

    """
    if depth >= MAX_TRIGGER_DEPTH:
        return False
    fired = False
    for trigger, _ in list(owner.triggers()):
        if trigger.condition != condition or not _can_fire(owner, trigger, action):
            continue
        if trigger.costs_reaction:
            owner.state.ledger.consume(REACTION_KEY)
            battle.emit(ResourceConsumed, unit_id=owner.id, resource=REACTION_KEY, amount=1)
        owner.state.trigger_uses[trigger.id] = owner.state.trigger_uses.get(trigger.id, 0) + 1
        debug("%s fires %s on %s", owner.name, trigger.id, condition)
        damage = _run_effects(battle, owner, trigger, other, depth)
        battle.emit(
            TriggerFired,
            owner_id=owner.id,
            trigger_id=trigger.id,
            condition=condition.name,
            other_id=other.id if other is not None else None,
            damage=damage,
        )
        fired = True
    return fired


def _run_effects(
    battle: BattleState,
    owner: Combatant,
    trigger: TriggerDefinition,
    other: Combatant | None,
    depth: int,
) -> float:
    """Runs the effects of a fired trigger and returns the damage they dealt."""
    damage = 0.0
    for effect in trigger.effects:
        recipient = owner if effect.on_self else other
        if recipient is None:
            continue
        if effect.kind == TriggerEffectKind.DEAL_DAMAGE:
            if not recipient.is_alive:
                continue
            raw = roll_formula(effect.amount or 0, battle.rng)
            amount = modify_damage(battle, owner, recipient, raw)
            outcome = apply_damage(battle, recipient, amount, owner.id)
            damage += outcome.damage
            after_damage(battle, recipient, outcome, owner, None, depth + 1)
        elif effect.kind == TriggerEffectKind.HEAL:
            apply_healing(battle, recipient, roll_formula(effect.amount or 0, battle.rng), owner.id)
        elif effect.kind == TriggerEffectKind.APPLY_BUFF:
            if recipient.is_alive and effect.buff is not None and effect.buff_id is not None:
                battle.effects.apply_buff(recipient, effect.buff_id, effect.buff, owner.id)
        elif effect.kind == TriggerEffectKind.REMOVE_BUFF:
            if effect.buff_id is not None:
                battle.effects.remove_buff(recipient, effect.buff_id, f"removed by {trigger.id}")
        elif effect.kind == TriggerEffectKind.INTERRUPT_ACTION:
            recipient.action_interrupted = True
            battle.emit(
                ActionInterrupted,
                actor_id=recipient.id,
                action_id=trigger.id,
                interrupter_id=owner.id,
            )
        elif effect.kind == TriggerEffectKind.RESTORE_RESOURCE and effect.resource:
            amount = roll_formula(effect.amount or 1, battle.rng)
            restored = recipient.state.ledger.restore(effect.resource, max(amount, 0.0))
            battle.emit(
                ResourceRestored,
                unit_id=recipient.id,
                resource=effect.resource,
                amount=restored,
            )
    return damage


def after_damage(
    battle: BattleState,
    target: Combatant,
    outcome: DamageOutcome,
    source: Combatant | None,
    action: BaseAction | None,
    depth: int = 0,
) -> None:
    """
    Fires the triggers that follow damage: being damaged, or a death.

    Args:
        battle (BattleState): The encounter.
        target (Combatant): The damaged combatant.
        outcome (DamageOutcome): The applied damage.
        source (Combatant | None): The damage dealer.
        action (BaseAction | None): The action that dealt the damage.
        depth (int): Reaction nesting level.

    """
    if outcome.killed:
        notify_death(battle, target, depth)
    elif outcome.damage > 0 and target.is_alive:
        fire_triggers(battle, target, TriggerCondition.ON_BEING_DAMAGED, source, action, depth)


def notify_death(battle: BattleState, dead: Combatant, depth: int = 0) -> None:
    """Fires the ally and enemy death triggers of every living combatant."""
    for combatant in battle.combatants:
        if combatant is dead or not combatant.is_alive:
            continue
        condition = (
            TriggerCondition.ON_ALLY_DEATH
            if combatant.team == dead.team
            else TriggerCondition.ON_ENEMY_DEATH
        )
        fire_triggers(battle, combatant, condition, dead, None, depth)
