"""
Event system module for the simulator.

Defines the tagged event records emitted by the engine. Each event kind has
a fixed set of serializable fields and is the authoritative description of
one state transition; together they form the event log used for replay,
visualization and invariant checks.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from encountersim.core.dice_parser import RollBreakdown


class BaseEvent(BaseModel):
    """Fields shared by every event."""

    model_config = ConfigDict(frozen=True)

    round: int = Field(default=0, description="Round the event happened in.")

    def __str__(self) -> str:
        fields = ", ".join(
            f"{name}={value}"
            for name, value in self.model_dump(exclude={"kind", "round"}).items()
            if not isinstance(value, (dict, list))
        )
        return f"{type(self).__name__}({fields})"


# ==============================================================================
# ENCOUNTER FLOW
# ==============================================================================


class EncounterStarted(BaseEvent):
    kind: Literal["encounter_started"] = "encounter_started"
    encounter_index: int = Field(description="Index of the encounter among the combats.")
    combatant_ids: list[str] = Field(default_factory=list, description="Ids of every combatant.")


class EncounterEnded(BaseEvent):
    kind: Literal["encounter_ended"] = "encounter_ended"
    encounter_index: int = Field(description="Index of the encounter among the combats.")
    winner: int | None = Field(default=None, description="Winning team, None on a draw.")
    reason: str = Field(description="Why the encounter ended.")
    rounds: int = Field(description="Number of rounds fought.")


class RoundStarted(BaseEvent):
    kind: Literal["round_started"] = "round_started"


class RoundEnded(BaseEvent):
    kind: Literal["round_ended"] = "round_ended"


class TurnStarted(BaseEvent):
    kind: Literal["turn_started"] = "turn_started"
    unit_id: str = Field(description="Combatant whose turn starts.")


class TurnEnded(BaseEvent):
    kind: Literal["turn_ended"] = "turn_ended"
    unit_id: str = Field(description="Combatant whose turn ends.")


class RestTaken(BaseEvent):
    kind: Literal["rest_taken"] = "rest_taken"
    rest_type: str = Field(description="Kind of rest.")
    unit_ids: list[str] = Field(default_factory=list, description="Combatants resting.")


# ==============================================================================
# ACTIONS
# ==============================================================================


class ActionStarted(BaseEvent):
    kind: Literal["action_started"] = "action_started"
    actor_id: str = Field(description="Acting combatant.")
    action_id: str = Field(description="Id of the action.")
    action_name: str = Field(description="Name of the action.")
    target_ids: list[str] = Field(default_factory=list, description="Chosen targets.")
    decision_trace: list[str] = Field(
        default_factory=list,
        description="Scores of the candidate actions, for auditing the choice.",
    )


class ActionSkipped(BaseEvent):
    kind: Literal["action_skipped"] = "action_skipped"
    actor_id: str = Field(description="Combatant that could not act.")
    reason: str = Field(description="Why the action was skipped.")
    action_id: str | None = Field(default=None, description="Id of the skipped action.")


class ActionInterrupted(BaseEvent):
    kind: Literal["action_interrupted"] = "action_interrupted"
    actor_id: str = Field(description="Combatant whose action was interrupted.")
    action_id: str = Field(description="Id of the interrupted action.")
    interrupter_id: str = Field(description="Combatant that interrupted it.")


class AttackHit(BaseEvent):
    kind: Literal["attack_hit"] = "attack_hit"
    attacker_id: str = Field(description="Attacking combatant.")
    target_id: str = Field(description="Combatant hit.")
    action_id: str = Field(description="Id of the attack.")
    damage: float = Field(description="Damage dealt, after modifiers.")
    attack_roll: RollBreakdown = Field(description="Breakdown of the attack roll.")
    damage_roll: RollBreakdown = Field(description="Breakdown of the damage roll.")
    is_critical: bool = Field(default=False, description="Whether the hit was critical.")
    target_ac: float = Field(description="Armor class the roll was compared to.")


class AttackMissed(BaseEvent):
    kind: Literal["attack_missed"] = "attack_missed"
    attacker_id: str = Field(description="Attacking combatant.")
    target_id: str = Field(description="Combatant missed.")
    action_id: str = Field(description="Id of the attack.")
    attack_roll: RollBreakdown = Field(description="Breakdown of the attack roll.")
    target_ac: float = Field(description="Armor class the roll was compared to.")
    is_fumble: bool = Field(default=False, description="Whether the roll was a natural 1.")


class SaveResolved(BaseEvent):
    kind: Literal["save_resolved"] = "save_resolved"
    source_id: str = Field(description="Combatant imposing the save.")
    target_id: str = Field(description="Combatant saving.")
    action_id: str = Field(description="Id of the action forcing the save.")
    dc: float = Field(description="Difficulty class.")
    roll: float = Field(description="Total of the saving throw.")
    succeeded: bool = Field(description="Whether the save succeeded.")
    damage: float = Field(default=0, description="Damage dealt after the save.")


# ==============================================================================
# HIT POINTS
# ==============================================================================


class DamageTaken(BaseEvent):
    kind: Literal["damage_taken"] = "damage_taken"
    target_id: str = Field(description="Combatant damaged.")
    source_id: str | None = Field(default=None, description="Combatant dealing the damage.")
    damage: float = Field(description="Incoming damage.")
    ward_absorbed: float = Field(default=0, description="Damage absorbed by the ward.")
    temp_absorbed: float = Field(default=0, description="Damage absorbed by temporary HP.")
    hp_lost: float = Field(default=0, description="Hit points lost.")


class HealingApplied(BaseEvent):
    kind: Literal["healing_applied"] = "healing_applied"
    healer_id: str | None = Field(default=None, description="Healing combatant.")
    target_id: str = Field(description="Combatant healed.")
    amount: float = Field(description="Hit points actually restored.")


class TempHPGranted(BaseEvent):
    kind: Literal["temp_hp_granted"] = "temp_hp_granted"
    source_id: str | None = Field(default=None, description="Granting combatant.")
    target_id: str = Field(description="Combatant receiving temporary HP.")
    amount: float = Field(description="New temporary HP total.")


class UnitDied(BaseEvent):
    kind: Literal["unit_died"] = "unit_died"
    unit_id: str = Field(description="Combatant that dropped to 0 HP.")
    killer_id: str | None = Field(default=None, description="Combatant that dealt the final blow.")


# ==============================================================================
# BUFFS
# ==============================================================================


class BuffApplied(BaseEvent):
    kind: Literal["buff_applied"] = "buff_applied"
    source_id: str | None = Field(default=None, description="Caster of the buff.")
    target_id: str = Field(description="Holder of the buff.")
    buff_id: str = Field(description="Id of the buff.")


class BuffExpired(BaseEvent):
    kind: Literal["buff_expired"] = "buff_expired"
    target_id: str = Field(description="Holder of the buff.")
    buff_id: str = Field(description="Id of the buff.")


class BuffRemoved(BaseEvent):
    kind: Literal["buff_removed"] = "buff_removed"
    target_id: str = Field(description="Holder of the buff.")
    buff_id: str = Field(description="Id of the buff.")
    source_id: str | None = Field(default=None, description="Caster of the buff.")
    reason: str = Field(description="Why the buff was removed.")


class ConcentrationBroken(BaseEvent):
    kind: Literal["concentration_broken"] = "concentration_broken"
    caster_id: str = Field(description="Concentrating combatant.")
    buff_id: str = Field(description="Buff that ended.")
    reason: str = Field(description="Why concentration was lost.")


class ConcentrationMaintained(BaseEvent):
    kind: Literal["concentration_maintained"] = "concentration_maintained"
    caster_id: str = Field(description="Concentrating combatant.")
    buff_id: str = Field(description="Buff kept.")
    dc: float = Field(description="DC of the concentration save.")
    roll: float = Field(description="Total of the concentration save.")


# ==============================================================================
# RESOURCES AND TRIGGERS
# ==============================================================================


class ResourceConsumed(BaseEvent):
    kind: Literal["resource_consumed"] = "resource_consumed"
    unit_id: str = Field(description="Combatant spending the resource.")
    resource: str = Field(description="Ledger key.")
    amount: float = Field(description="Amount spent.")


class ResourceRestored(BaseEvent):
    kind: Literal["resource_restored"] = "resource_restored"
    unit_id: str = Field(description="Combatant regaining the resource.")
    resource: str = Field(description="Ledger key.")
    amount: float = Field(description="Amount regained.")


class TriggerFired(BaseEvent):
    kind: Literal["trigger_fired"] = "trigger_fired"
    owner_id: str = Field(description="Combatant owning the trigger.")
    trigger_id: str = Field(description="Id of the trigger.")
    condition: str = Field(description="Condition that fired it.")
    other_id: str | None = Field(default=None, description="Other combatant involved.")
    damage: float = Field(default=0, description="Damage dealt by the trigger's effects.")


class Custom(BaseEvent):
    kind: Literal["custom"] = "custom"
    event_type: str = Field(description="Free-form event type.")
    source_id: str | None = Field(default=None, description="Combatant emitting the event.")
    data: dict[str, Any] = Field(default_factory=dict, description="Event payload.")


Event = Annotated[
    Union[
        EncounterStarted,
        EncounterEnded,
        RoundStarted,
        RoundEnded,
        TurnStarted,
        TurnEnded,
        RestTaken,
        ActionStarted,
        ActionSkipped,
        ActionInterrupted,
        AttackHit,
        AttackMissed,
        SaveResolved,
        DamageTaken,
        HealingApplied,
        TempHPGranted,
        UnitDied,
        BuffApplied,
        BuffExpired,
        BuffRemoved,
        ConcentrationBroken,
        ConcentrationMaintained,
        ResourceConsumed,
        ResourceRestored,
        TriggerFired,
        Custom,
    ],
    Field(discriminator="kind"),
]
