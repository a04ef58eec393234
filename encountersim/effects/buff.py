"""
Buff module for the simulator.

Defines buffs (numeric modifiers and conditions with a lifetime rule), the
triggers that can be embedded in buffs and creatures, and the live
instance of a buff attached to a combatant.
"""

from typing import Any

from pydantic import BaseModel, Field

from encountersim.core.constants import (
    Ability,
    BuffDuration,
    CreatureCondition,
    TriggerCondition,
    TriggerEffectKind,
)
from encountersim.core.dice_parser import Formula


class TriggerEffect(BaseModel):
    """One effect produced when a trigger fires."""

    kind: TriggerEffectKind = Field(description="What the effect does.")
    amount: Formula | None = Field(
        default=None,
        description="Damage, healing or resource amount.",
    )
    buff_id: str | None = Field(
        default=None,
        description="Id of the buff applied or removed.",
    )
    buff: "Buff | None" = Field(
        default=None,
        description="Buff applied by an APPLY_BUFF effect.",
    )
    resource: str | None = Field(
        default=None,
        description="Ledger key restored by a RESTORE_RESOURCE effect.",
    )
    on_self: bool = Field(
        default=False,
        description="Whether the effect targets the trigger owner instead of the other party.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if self.kind == TriggerEffectKind.APPLY_BUFF and self.buff is None:
            raise ValueError("APPLY_BUFF effects need a buff")
        if self.kind in (TriggerEffectKind.APPLY_BUFF, TriggerEffectKind.REMOVE_BUFF):
            if not self.buff_id:
                raise ValueError(f"{self.kind} effects need a buff_id")
        if self.kind == TriggerEffectKind.RESTORE_RESOURCE and not self.resource:
            raise ValueError("RESTORE_RESOURCE effects need a resource key")


class TriggerDefinition(BaseModel):
    """A reactive rule: when a condition happens, produce some effects."""

    id: str = Field(description="Unique id of the trigger.")
    condition: TriggerCondition = Field(description="Condition that fires the trigger.")
    effects: list[TriggerEffect] = Field(
        default_factory=list,
        description="Effects produced when the trigger fires.",
    )
    costs_reaction: bool = Field(
        default=False,
        description="Whether firing the trigger spends the owner's reaction.",
    )
    uses_per_encounter: int | None = Field(
        default=None,
        description="How many times the trigger may fire per encounter.",
    )
    hp_below_percent: float | None = Field(
        default=None,
        description="Only fire while the owner is below this fraction of max HP.",
    )
    required_tags: list[str] = Field(
        default_factory=list,
        description="Only fire for actions carrying every one of these tags.",
    )


class Buff(BaseModel):
    """Numeric modifiers and conditions with a lifetime rule."""

    display_name: str | None = Field(default=None, description="Name shown in logs.")
    duration: BuffDuration = Field(
        default=BuffDuration.ENTIRE_ENCOUNTER,
        description="Lifetime rule of the buff.",
    )
    rounds: int | None = Field(
        default=None,
        description="Number of rounds, for N_ROUNDS buffs.",
    )
    ac: Formula | None = Field(default=None, description="Bonus to armor class.")
    to_hit: Formula | None = Field(default=None, description="Bonus to attack rolls.")
    damage: Formula | None = Field(default=None, description="Extra damage on hit.")
    damage_reduction: Formula | None = Field(
        default=None,
        description="Flat reduction of incoming damage.",
    )
    damage_multiplier: float | None = Field(
        default=None,
        description="Multiplier on outgoing damage.",
    )
    damage_taken_multiplier: float | None = Field(
        default=None,
        description="Multiplier on incoming damage.",
    )
    dc: Formula | None = Field(default=None, description="Bonus to save DCs imposed.")
    save: Formula | None = Field(default=None, description="Bonus to saving throws.")
    initiative: Formula | None = Field(default=None, description="Bonus to initiative.")
    condition: CreatureCondition | None = Field(
        default=None,
        description="Condition imposed on the holder.",
    )
    concentration: bool = Field(
        default=False,
        description="Whether the caster must concentrate to keep the buff.",
    )
    repeat_save_dc: float | None = Field(
        default=None,
        description="DC of the end-of-turn save that ends the buff.",
    )
    repeat_save_ability: Ability = Field(
        default=Ability.WIS,
        description="Ability used for the end-of-turn save.",
    )
    triggers: list[TriggerDefinition] = Field(
        default_factory=list,
        description="Triggers granted to the holder while the buff lasts.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if self.duration == BuffDuration.N_ROUNDS and (self.rounds is None or self.rounds <= 0):
            raise ValueError("N_ROUNDS buffs need a positive number of rounds")
        if self.duration == BuffDuration.REPEAT_SAVE_EACH_ROUND and self.repeat_save_dc is None:
            raise ValueError("REPEAT_SAVE_EACH_ROUND buffs need a repeat_save_dc")

    @property
    def initial_rounds(self) -> int | None:
        """Returns the number of rounds the buff lasts, if it is round based."""
        if self.duration == BuffDuration.ONE_ROUND:
            return 1
        if self.duration == BuffDuration.N_ROUNDS:
            return self.rounds
        return None

    @property
    def is_incapacitating(self) -> bool:
        return self.condition is not None and self.condition.is_incapacitating


TriggerEffect.model_rebuild()


class ActiveBuff(BaseModel):
    """A buff attached to a combatant."""

    buff_id: str = Field(description="Id of the buff, unique on its holder.")
    buff: Buff = Field(description="The buff definition.")
    source_id: str | None = Field(
        default=None,
        description="Id of the combatant that applied the buff, None if innate.",
    )
    remaining_rounds: int | None = Field(
        default=None,
        description="Rounds left for round-based durations.",
    )

    @property
    def name(self) -> str:
        return self.buff.display_name or self.buff_id

    def __str__(self) -> str:
        rounds = f", {self.remaining_rounds} rounds" if self.remaining_rounds is not None else ""
        return f"{self.name} ({self.buff.duration.display_name}{rounds})"
