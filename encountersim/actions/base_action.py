"""
Base action module for the simulator.

Defines the contract shared by every action variant: identity, the action
slot it consumes, extra ledger costs, usage frequency, the gate deciding
whether it may be picked and the targeting policy used to pick victims.
"""

from typing import Any

from pydantic import BaseModel, Field

from encountersim.character.character_resources import resource_key, usage_key
from encountersim.core.constants import (
    ActionCondition,
    ActionSlot,
    FrequencyKind,
    ResetType,
    ResourceKind,
    TargetPolicy,
)


class Frequency(BaseModel):
    """How often an action may be used."""

    kind: FrequencyKind = Field(
        default=FrequencyKind.AT_WILL,
        description="Usage frequency of the action.",
    )
    recharge_min: int = Field(
        default=6,
        description="Minimum d6 result that recharges a RECHARGE action.",
    )
    uses: int = Field(
        default=1,
        description="Number of uses of a LIMITED action.",
    )
    reset: ResetType = Field(
        default=ResetType.LONG_REST,
        description="When the uses of a LIMITED action come back.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not 1 <= self.recharge_min <= 6:
            raise ValueError("recharge_min must be between 1 and 6")
        if self.uses < 0:
            raise ValueError("uses must be non-negative")

    @property
    def is_limited(self) -> bool:
        return self.kind != FrequencyKind.AT_WILL


class ActionCost(BaseModel):
    """An extra resource spent when the action is used."""

    kind: ResourceKind = Field(description="Kind of resource spent.")
    detail: str | int | None = Field(
        default=None,
        description="Spell level, resource name or die size.",
    )
    amount: float = Field(default=1, description="Amount spent.")

    @property
    def key(self) -> str:
        return resource_key(self.kind, self.detail)


class BaseAction(BaseModel):
    """
    Base class for every action a creature can take.

    Concrete variants add their own payload and a ``type`` literal used to
    discriminate the Action union.
    """

    id: str = Field(description="Unique id of the action.")
    name: str = Field(description="Name of the action.")
    action_slot: ActionSlot = Field(
        default=ActionSlot.ACTION,
        description="Slot consumed when the action is used.",
    )
    cost: list[ActionCost] = Field(
        default_factory=list,
        description="Extra resources spent on use.",
    )
    frequency: Frequency = Field(
        default_factory=Frequency,
        description="How often the action may be used.",
    )
    condition: ActionCondition = Field(
        default=ActionCondition.DEFAULT,
        description="Gate deciding whether the action may be picked.",
    )
    targets: int = Field(default=1, description="Maximum number of targets.")
    target_policy: TargetPolicy = Field(
        default=TargetPolicy.ENEMY_LEAST_HP,
        description="Policy used to pick targets.",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Free-form tags, matched by triggers.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.id:
            raise ValueError("action id must be a non-empty string")
        if self.targets <= 0:
            raise ValueError("targets must be positive")

    @property
    def usage_key(self) -> str:
        return usage_key(self.id)

    def slot_key(self) -> str | None:
        """Returns the ledger key of the slot the action consumes, if any."""
        return {
            ActionSlot.ACTION: resource_key(ResourceKind.ACTION),
            ActionSlot.BONUS_ACTION: resource_key(ResourceKind.BONUS_ACTION),
            ActionSlot.REACTION: resource_key(ResourceKind.REACTION),
        }.get(self.action_slot)

    def all_costs(self) -> list[tuple[str, float]]:
        """
        Lists every ledger entry the action spends.

        Returns:
            list[tuple[str, float]]: (key, amount) pairs, slot first.

        """
        costs: list[tuple[str, float]] = []
        slot = self.slot_key()
        if slot is not None:
            costs.append((slot, 1))
        costs.extend((cost.key, cost.amount) for cost in self.cost)
        if self.frequency.is_limited:
            costs.append((self.usage_key, 1))
        return costs

    def __str__(self) -> str:
        return f"{self.name} ({self.action_slot.display_name})"
