"""
Creature module for the simulator.

Defines the immutable creature template shared by every combatant created
from it, together with the helpers that derive its starting resource
ledger and the static estimates used by targeting and action scoring.
"""

from typing import Any

from pydantic import BaseModel, Field

from encountersim.actions import Action, AttackAction, TemplateAction
from encountersim.character.character_resources import ResourceLedger, resource_key
from encountersim.core.constants import (
    DEFAULT_MOVEMENT,
    SHORT_REST_RESOURCES,
    Ability,
    ActionSlot,
    FrequencyKind,
    ResetType,
    ResourceKind,
)
from encountersim.core.dice_parser import Formula, average_formula, parse_dice_pool
from encountersim.effects.buff import Buff, TriggerDefinition

# Armor class assumed when estimating damage output without a target.
BASELINE_AC = 15.0
# Attack bonus assumed when estimating how hard a creature is to kill.
BASELINE_ATTACK_BONUS = 5.0


def hit_chance(to_hit: float, ac: float) -> float:
    """
    Computes the chance that an attack roll hits.

    Args:
        to_hit (float): The attack bonus.
        ac (float): The armor class of the target.

    Returns:
        float: The chance, between 0.05 (natural 20 only) and 0.95.

    """
    needed = ac - to_hit
    return min(0.95, max(0.05, (21.0 - needed) / 20.0))


class Creature(BaseModel):
    """Immutable definition of a creature."""

    id: str = Field(description="Unique id of the creature.")
    name: str = Field(description="Display name of the creature.")
    count: int = Field(default=1, description="Number of instances in an encounter.")
    hp: float = Field(description="Maximum hit points.")
    ac: float = Field(description="Armor class.")
    save_bonus: float = Field(default=0, description="Default saving throw bonus.")
    saves: dict[Ability, float] = Field(
        default_factory=dict,
        description="Saving throw bonus overrides per ability.",
    )
    initiative_bonus: Formula = Field(default=0, description="Initiative bonus.")
    initiative_advantage: bool = Field(
        default=False,
        description="Whether initiative is rolled with advantage.",
    )
    actions: list[Action] = Field(default_factory=list, description="Available actions.")
    triggers: list[TriggerDefinition] = Field(
        default_factory=list,
        description="Reactive rules of the creature.",
    )
    spell_slots: dict[int, int] = Field(
        default_factory=dict,
        description="Spell slots per spell level.",
    )
    class_resources: dict[str, int] = Field(
        default_factory=dict,
        description="Class resources per name, such as Ki or Rage.",
    )
    hit_dice: str | None = Field(
        default=None,
        description="Hit dice pool, such as '5d10+2d8'.",
    )
    con_modifier: float = Field(
        default=0,
        description="Constitution modifier added to each hit die spent.",
    )
    max_arcane_ward_hp: float | None = Field(
        default=None,
        description="Capacity of the absorption pool consumed before hit points.",
    )
    initial_buffs: dict[str, Buff] = Field(
        default_factory=dict,
        description="Innate buffs present at the start of every encounter.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.id:
            raise ValueError("creature id must be a non-empty string")
        if self.count <= 0:
            raise ValueError("count must be positive")
        if self.hp <= 0:
            raise ValueError("hp must be positive")
        if self.max_arcane_ward_hp is not None and self.max_arcane_ward_hp < 0:
            raise ValueError("max_arcane_ward_hp must be non-negative")
        ids = [action.id for action in self.actions]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate action ids in creature {self.id}")

    # ==========================================================================
    # RESOURCES
    # ==========================================================================

    def initialize_ledger(self) -> ResourceLedger:
        """
        Builds the full, refilled resource ledger of a fresh instance.

        Returns:
            ResourceLedger: The ledger.

        """
        ledger = ResourceLedger()
        ledger.register(resource_key(ResourceKind.ACTION), 1, ResetType.TURN)
        ledger.register(resource_key(ResourceKind.BONUS_ACTION), 1, ResetType.TURN)
        ledger.register(resource_key(ResourceKind.MOVEMENT), DEFAULT_MOVEMENT, ResetType.TURN)
        ledger.register(resource_key(ResourceKind.REACTION), 1, ResetType.ROUND)

        for level, count in sorted(self.spell_slots.items()):
            ledger.register(
                resource_key(ResourceKind.SPELL_SLOT, level), count, ResetType.LONG_REST
            )

        for name, count in self.class_resources.items():
            reset = ResetType.SHORT_REST if name in SHORT_REST_RESOURCES else ResetType.LONG_REST
            ledger.register(resource_key(ResourceKind.CLASS_RESOURCE, name), count, reset)

        for sides, count in sorted(self.hit_dice_pool().items()):
            ledger.register(
                resource_key(ResourceKind.HIT_DICE, f"D{sides}"), count, ResetType.LONG_REST
            )

        for action in self.actions:
            frequency = action.frequency
            if frequency.kind == FrequencyKind.ONCE_PER_FIGHT:
                ledger.register(action.usage_key, 1, ResetType.ENCOUNTER)
            elif frequency.kind == FrequencyKind.ONCE_PER_DAY:
                ledger.register(action.usage_key, 1, ResetType.LONG_REST)
            elif frequency.kind == FrequencyKind.RECHARGE:
                # Recharge rolls happen at turn start; encounters start charged.
                ledger.register(action.usage_key, 1, ResetType.ENCOUNTER)
            elif frequency.kind == FrequencyKind.LIMITED:
                ledger.register(action.usage_key, frequency.uses, frequency.reset)
        return ledger

    def hit_dice_pool(self) -> dict[int, int]:
        """Returns the number of hit dice per die size."""
        if not self.hit_dice:
            return {}
        return parse_dice_pool(self.hit_dice)

    # ==========================================================================
    # ESTIMATES
    # ==========================================================================

    def save_bonus_for(self, ability: Ability) -> float:
        return self.saves.get(ability, self.save_bonus)

    def estimated_dpr(self, target_ac: float = BASELINE_AC) -> float:
        """
        Estimates damage per round: the best action plus the best bonus action.

        Args:
            target_ac (float): Armor class assumed for the targets.

        Returns:
            float: Expected damage per round.

        """
        best: dict[ActionSlot, float] = {}
        for action in self.actions:
            if isinstance(action, AttackAction):
                per_hit = average_formula(action.damage)
                if action.use_saves:
                    chance = 0.5
                else:
                    chance = hit_chance(average_formula(action.to_hit), target_ac)
                expected = per_hit * chance * action.targets
            elif isinstance(action, TemplateAction) and action.damage is not None:
                expected = average_formula(action.damage) * 0.75 * action.targets
            else:
                continue
            best[action.action_slot] = max(best.get(action.action_slot, 0.0), expected)
        return best.get(ActionSlot.ACTION, 0.0) + best.get(ActionSlot.BONUS_ACTION, 0.0)

    def survivability_score(self, attack_bonus: float = BASELINE_ATTACK_BONUS) -> float:
        """
        Estimates how hard the creature is to bring down.

        Args:
            attack_bonus (float): Attack bonus assumed for its enemies.

        Returns:
            float: Effective hit points, HP divided by the chance of being hit.

        """
        multiplier = 2.0 if "Rage" in self.class_resources else 1.0
        ward = self.max_arcane_ward_hp or 0.0
        return round((self.hp + ward) / hit_chance(attack_bonus, self.ac) * multiplier)

    def instance_ids(self) -> list[str]:
        """Returns the stable ids of the combatants built from this creature."""
        if self.count == 1:
            return [self.id]
        return [f"{self.id}-{index + 1}" for index in range(self.count)]
