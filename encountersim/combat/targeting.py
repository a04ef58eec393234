"""
Targeting module for the simulator.

Resolves the victims of an action from its declarative targeting policy.
Candidates are ranked with a stable sort, so ties always go to the
combatant listed first, and the resolver returns fewer targets than
requested rather than failing when the roster is too small.
"""

from collections.abc import Callable

from encountersim.actions import BaseAction, BuffAction, DebuffAction, HealAction
from encountersim.character.combatant import Combatant
from encountersim.core.constants import Side, TargetPolicy

# Ranking key (lower ranks first) for each policy, over the live combatant.
_RANKINGS: dict[TargetPolicy, Callable[[Combatant], float]] = {
    TargetPolicy.ENEMY_LEAST_HP: lambda c: c.hp,
    TargetPolicy.ENEMY_MOST_HP: lambda c: -c.hp,
    TargetPolicy.ENEMY_HIGHEST_DPR: lambda c: -c.creature.estimated_dpr(),
    TargetPolicy.ENEMY_LOWEST_AC: lambda c: c.ac,
    TargetPolicy.ENEMY_HIGHEST_AC: lambda c: -c.ac,
    TargetPolicy.ENEMY_HIGHEST_SURVIVABILITY: lambda c: -c.creature.survivability_score(),
    TargetPolicy.ALLY_LEAST_HP: lambda c: c.hp,
    TargetPolicy.ALLY_MOST_HP: lambda c: -c.hp,
    TargetPolicy.ALLY_HIGHEST_DPR: lambda c: -c.creature.estimated_dpr(),
    TargetPolicy.ALLY_LOWEST_AC: lambda c: c.ac,
    TargetPolicy.ALLY_HIGHEST_AC: lambda c: -c.ac,
    TargetPolicy.ALLY_MOST_INJURED: lambda c: -c.missing_hp,
}


def _is_candidate(actor: Combatant, action: BaseAction, candidate: Combatant) -> bool:
    if not candidate.is_alive:
        return False
    if isinstance(action, (BuffAction, DebuffAction)) and candidate.has_buff(action.id):
        return False
    if isinstance(action, HealAction) and not action.temp_hp and candidate.missing_hp <= 0:
        return False
    return True


def get_targets(
    actor: Combatant,
    action: BaseAction,
    allies: list[Combatant],
    enemies: list[Combatant],
) -> list[tuple[Side, int]]:
    """
    Selects the targets of an action.

    Args:
        actor (Combatant): The acting combatant.
        action (BaseAction): The action being resolved.
        allies (list[Combatant]): The actor's team, in roster order.
        enemies (list[Combatant]): The opposing team, in roster order.

    Returns:
        list[tuple[Side, int]]: Up to ``action.targets`` distinct targets, as
            (side, index into that side's list), best first.

    """
    policy = action.target_policy
    if policy == TargetPolicy.SELF:
        for index, ally in enumerate(allies):
            if ally is actor and _is_candidate(actor, action, ally):
                return [(Side.ALLY, index)]
        return []

    side = policy.side
    roster = allies if side == Side.ALLY else enemies
    candidates = [
        (index, combatant)
        for index, combatant in enumerate(roster)
        if _is_candidate(actor, action, combatant)
    ]
    rank = _RANKINGS[policy]
    # sorted() is stable: equal ranks keep roster order.
    candidates = sorted(candidates, key=lambda entry: rank(entry[1]))
    return [(side, index) for index, _ in candidates[: action.targets]]


def resolve_targets(
    actor: Combatant,
    action: BaseAction,
    allies: list[Combatant],
    enemies: list[Combatant],
) -> list[Combatant]:
    """Same as get_targets, but returns the combatants themselves."""
    return [
        allies[index] if side == Side.ALLY else enemies[index]
        for side, index in get_targets(actor, action, allies, enemies)
    ]
