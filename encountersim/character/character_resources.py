"""
Character resources module for the simulator.

Defines the resource ledger: the per-combatant pool of consumable
quantities (action slots, spell slots, class resources, hit dice and
per-action usage counters), each with the reset rule that refills it.
"""

import re
from logging import debug

from pydantic import BaseModel, Field

from encountersim.core.constants import ResetType, ResourceKind
from encountersim.core.error_handling import InsufficientResourceError

# Effective-HP weight of each kind of daily resource.
HP_WEIGHT = 1.0
HIT_DIE_WEIGHT = 8.0
SPELL_SLOT_BASE = 15.0
SR_FEATURE_WEIGHT = 15.0
LR_FEATURE_WEIGHT = 30.0

_DETAIL_PATTERN = re.compile(r"^\w+\((.*)\)$")


def resource_key(kind: ResourceKind, detail: str | int | None = None) -> str:
    """
    Builds the ledger key of a resource.

    Args:
        kind (ResourceKind): The kind of resource.
        detail (str | int | None): Spell level, resource name or die size.

    Returns:
        str: The key, such as ``"SpellSlot(3)"`` or ``"Action"``.

    """
    if detail is None:
        return kind.value
    return f"{kind.value}({detail})"


def usage_key(action_id: str) -> str:
    """Returns the ledger key tracking uses of the given action."""
    return resource_key(ResourceKind.CUSTOM, f"Usage:{action_id}")


def key_detail(key: str) -> str | None:
    """Extracts the detail part of a key, as in ``SpellSlot(3)`` -> ``"3"``."""
    match = _DETAIL_PATTERN.match(key)
    return match.group(1) if match else None


def resource_weight(key: str, reset: ResetType) -> float:
    """
    Returns the effective-HP value of one unit of a resource.

    Args:
        key (str): The ledger key.
        reset (ResetType): The reset rule of the resource.

    Returns:
        float: The weight, or 0.0 for resources outside the daily budget.

    """
    if key.startswith(ResourceKind.HIT_DICE.value):
        return HIT_DIE_WEIGHT
    if key.startswith(ResourceKind.SPELL_SLOT.value):
        detail = key_detail(key)
        try:
            level = float(detail) if detail is not None else 0.0
        except ValueError:
            return 0.0
        return SPELL_SLOT_BASE * level**1.5
    if key.startswith(ResourceKind.CLASS_RESOURCE.value) or (
        key.startswith(ResourceKind.CUSTOM.value) and "Usage:" not in key
    ):
        if reset == ResetType.SHORT_REST:
            return SR_FEATURE_WEIGHT
        if reset == ResetType.LONG_REST:
            return LR_FEATURE_WEIGHT
    return 0.0


class ResourceSnapshot(BaseModel):
    """Frozen view of one ledger entry."""

    current: float = Field(description="Amount currently available.")
    max: float | None = Field(default=None, description="Capacity, None if unbounded.")
    reset: ResetType = Field(description="Reset rule of the resource.")


class ResourceLedger:
    """
    Pool of consumable resources with typed reset rules.

    Every mutation keeps ``0 <= current <= max``: consumption that would go
    below zero fails with an InsufficientResourceError instead of clamping,
    while restoration clamps at the maximum.
    """

    def __init__(self) -> None:
        self.current: dict[str, float] = {}
        self.max: dict[str, float | None] = {}
        self.reset_rules: dict[str, ResetType] = {}
        # Weighted effective-HP value of everything consumed so far.
        self.spent_weighted: float = 0.0

    def register(self, key: str, maximum: float | None, reset: ResetType) -> None:
        """
        Registers a resource and fills it.

        Args:
            key (str): The ledger key.
            maximum (float | None): Capacity, None for an unbounded resource.
            reset (ResetType): When the resource refills.

        """
        if maximum is not None and maximum < 0:
            raise ValueError(f"Resource {key} cannot have a negative maximum")
        self.max[key] = maximum
        self.reset_rules[key] = reset
        self.current[key] = maximum if maximum is not None else 0.0

    def get(self, key: str) -> float:
        return self.current.get(key, 0.0)

    def get_max(self, key: str) -> float | None:
        return self.max.get(key)

    def has(self, key: str, amount: float = 1) -> bool:
        """
        Checks whether enough of a resource is available.

        Args:
            key (str): The ledger key.
            amount (float): The amount needed. Defaults to 1.

        Returns:
            bool: True if at least ``amount`` is available.

        """
        return self.current.get(key, 0.0) >= amount

    def consume(self, key: str, amount: float = 1) -> None:
        """
        Consumes a resource.

        Args:
            key (str): The ledger key.
            amount (float): The amount to consume. Defaults to 1.

        Raises:
            InsufficientResourceError: If less than ``amount`` is available.

        """
        if amount < 0:
            raise ValueError("Cannot consume a negative amount")
        available = self.current.get(key, 0.0)
        if available < amount:
            raise InsufficientResourceError(key, amount, available)
        self.current[key] = available - amount
        reset = self.reset_rules.get(key, ResetType.NEVER)
        self.spent_weighted += amount * resource_weight(key, reset)
        debug("Consumed %s %s (%s -> %s)", amount, key, available, self.current[key])

    def restore(self, key: str, amount: float = 1) -> float:
        """
        Restores a resource, clamping at its maximum.

        Unknown keys are registered on the fly as unbounded resources that
        never reset.

        Args:
            key (str): The ledger key.
            amount (float): The amount to restore. Defaults to 1.

        Returns:
            float: The amount actually restored.

        """
        if amount < 0:
            raise ValueError("Cannot restore a negative amount")
        if key not in self.current:
            self.register(key, None, ResetType.NEVER)
        before = self.current[key]
        maximum = self.max.get(key)
        after = before + amount if maximum is None else min(before + amount, maximum)
        self.current[key] = after
        return after - before

    def reset(self, reset_type: ResetType) -> list[str]:
        """
        Refills every resource whose rule is satisfied by the given reset.

        Args:
            reset_type (ResetType): The reset happening now.

        Returns:
            list[str]: The keys that were refilled.

        """
        refilled = []
        for key, rule in self.reset_rules.items():
            maximum = self.max.get(key)
            if maximum is None or not rule.is_satisfied_by(reset_type):
                continue
            if self.current[key] != maximum:
                refilled.append(key)
            self.current[key] = maximum
        return refilled

    def keys(self) -> list[str]:
        return list(self.current.keys())

    def snapshot(self) -> dict[str, ResourceSnapshot]:
        """Returns a frozen copy of every entry."""
        return {
            key: ResourceSnapshot(
                current=value,
                max=self.max.get(key),
                reset=self.reset_rules.get(key, ResetType.NEVER),
            )
            for key, value in self.current.items()
        }

    def copy(self) -> "ResourceLedger":
        other = ResourceLedger()
        other.current = dict(self.current)
        other.max = dict(self.max)
        other.reset_rules = dict(self.reset_rules)
        other.spent_weighted = self.spent_weighted
        return other

    def __repr__(self) -> str:
        entries = ", ".join(
            f"{key}={value:g}/{self.max.get(key)}" for key, value in self.current.items()
        )
        return f"ResourceLedger({entries})"
