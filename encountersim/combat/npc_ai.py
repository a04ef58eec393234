"""
NPC AI module for the simulator.

Chooses what each combatant does on its turn. Every action in a slot is
checked for availability (resources, usage frequency and its condition
gate), given targets by the targeting resolver and scored; the first
declared action with a positive score is taken.
"""

from pydantic import BaseModel, ConfigDict, Field

from encountersim.actions import (
    AttackAction,
    BaseAction,
    BuffAction,
    DebuffAction,
    HealAction,
    TemplateAction,
)
from encountersim.character.combatant import Combatant
from encountersim.combat.battle_state import BattleState
from encountersim.combat.targeting import resolve_targets
from encountersim.core.constants import ActionCondition, ActionSlot
from encountersim.core.dice_parser import average_formula

# =============================================================================
# Support Functions
# =============================================================================


class ActionSelection(BaseModel):
    """An action picked for a turn, with its targets and the scores behind the choice."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    action: BaseAction = Field(description="The action chosen.")
    targets: list[Combatant] = Field(
        default_factory=list,
        description="Targets resolved for the action.",
    )
    score: float = Field(description="Score of the selection (higher is better).")
    trace: list[str] = Field(
        default_factory=list,
        description="Score of every candidate considered.",
    )


def check_condition(battle: BattleState, actor: Combatant, action: BaseAction) -> bool:
    """
    Evaluates the condition gate of an action.

    Args:
        battle (BattleState): The encounter.
        actor (Combatant): The acting combatant.
        action (BaseAction): The action.

    Returns:
        bool: True if the action may be picked now.

    """
    allies = [ally for ally in battle.allies_of(actor) if ally.is_alive]
    enemies = [enemy for enemy in battle.enemies_of(actor) if enemy.is_alive]
    condition = action.condition
    if condition in (ActionCondition.DEFAULT, ActionCondition.IS_AVAILABLE):
        return True
    if condition == ActionCondition.ALLY_BELOW_HALF_HP:
        return any(ally.hp < ally.max_hp / 2 for ally in allies)
    if condition == ActionCondition.ANY_ALLY_INJURED:
        return any(ally.missing_hp > 0 for ally in allies)
    if condition == ActionCondition.IS_UNDER_HALF_HP:
        return actor.hp < actor.max_hp / 2
    if condition == ActionCondition.HAS_NO_TEMP_HP:
        return actor.state.temp_hp <= 0
    if condition == ActionCondition.NOT_USED_YET:
        return all(record.action_id != action.id for record in actor.actions_taken)
    if condition == ActionCondition.ENEMY_COUNT_ONE:
        return len(enemies) == 1
    if condition == ActionCondition.ENEMY_COUNT_MULTIPLE:
        return len(enemies) > 1
    return False


def can_afford(actor: Combatant, action: BaseAction) -> bool:
    """Checks that every ledger entry the action spends is available."""
    totals: dict[str, float] = {}
    for key, amount in action.all_costs():
        totals[key] = totals.get(key, 0.0) + amount
    return all(actor.state.ledger.has(key, amount) for key, amount in totals.items())


def score_action(
    battle: BattleState,
    actor: Combatant,
    action: BaseAction,
    targets: list[Combatant],
) -> float:
    """
    Scores an action against its resolved targets.

    Args:
        battle (BattleState): The encounter.
        actor (Combatant): The acting combatant.
        action (BaseAction): The action.
        targets (list[Combatant]): The resolved targets.

    Returns:
        float: The score, 0 when the action is pointless.

    """
    if not targets:
        return 0.0
    early = battle.round <= 2

    if isinstance(action, AttackAction):
        return max(1.0, average_formula(action.damage) * len(targets) * 10.0)

    if isinstance(action, HealAction):
        amount = average_formula(action.amount)
        if action.temp_hp:
            useful = [t for t in targets if t.state.temp_hp < amount]
        else:
            useful = [t for t in targets if t.missing_hp > 0]
        if not useful:
            return 0.0
        return max(10.0, amount * len(useful) * 15.0)

    if isinstance(action, BuffAction):
        if action.buff.concentration and actor.state.concentrating_on is not None:
            return 0.0
        return 50.0 if early else 20.0

    if isinstance(action, DebuffAction):
        if action.buff.concentration and actor.state.concentrating_on is not None:
            return 0.0
        healthy = sum(1 for target in targets if target.hp > 20)
        return 30.0 * healthy if healthy else 10.0

    if isinstance(action, TemplateAction):
        if actor.state.concentrating_on is not None and (
            action.buff is not None and action.buff.concentration
        ):
            return 5.0
        return 100.0 if early else 40.0

    return 0.0


def choose_action(
    battle: BattleState,
    actor: Combatant,
    slot: ActionSlot,
) -> ActionSelection | None:
    """
    Chooses the action a combatant takes in one action slot.

    Args:
        battle (BattleState): The encounter.
        actor (Combatant): The acting combatant.
        slot (ActionSlot): The slot being filled.

    Returns:
        ActionSelection | None: The first declared action with a positive
            score, or None if nothing is worth doing.

    """
    allies = battle.allies_of(actor)
    enemies = battle.enemies_of(actor)
    trace: list[str] = []
    for action in actor.creature.actions:
        if action.action_slot != slot:
            continue
        if not can_afford(actor, action):
            trace.append(f"{action.id}: unavailable")
            continue
        if not check_condition(battle, actor, action):
            trace.append(f"{action.id}: condition {action.condition} not met")
            continue
        targets = resolve_targets(actor, action, allies, enemies)
        score = score_action(battle, actor, action, targets)
        trace.append(f"{action.id}: {score:g}")
        if score > 0:
            return ActionSelection(action=action, targets=targets, score=score, trace=trace)
    return None
