"""
Combatant module for the simulator.

Defines the live instance of a creature inside one encounter: its mutable
state (hit points, temporary hit points, ward, buffs, concentration and
resource ledger), the per-encounter statistics it accumulates, and the
frozen snapshots taken at encounter start, after each round and at the end.
"""

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, Field

from encountersim.character.character_resources import ResourceLedger, ResourceSnapshot
from encountersim.character.creature import Creature
from encountersim.core.constants import Ability, CreatureCondition, Team
from encountersim.core.dice_parser import average_formula, roll_formula
from encountersim.core.rng import DiceRng
from encountersim.core.utils import make_bar
from encountersim.effects.buff import ActiveBuff, TriggerDefinition

# ==============================================================================
# SNAPSHOTS
# ==============================================================================


class BuffSnapshot(BaseModel):
    """Frozen view of an active buff."""

    buff_id: str = Field(description="Id of the buff.")
    name: str = Field(description="Display name of the buff.")
    source_id: str | None = Field(default=None, description="Id of the caster.")
    remaining_rounds: int | None = Field(default=None, description="Rounds left.")


class CreatureStateSnapshot(BaseModel):
    """Frozen view of the state of a combatant."""

    current_hp: float = Field(description="Current hit points.")
    temp_hp: float = Field(default=0, description="Temporary hit points.")
    ward_hp: float = Field(default=0, description="Remaining absorption pool.")
    buffs: list[BuffSnapshot] = Field(default_factory=list, description="Active buffs.")
    concentrating_on: str | None = Field(
        default=None,
        description="Id of the buff the combatant concentrates on.",
    )
    resources: dict[str, ResourceSnapshot] = Field(
        default_factory=dict,
        description="Resource ledger entries.",
    )
    spent_weighted: float = Field(
        default=0,
        description="Weighted value of every resource consumed so far.",
    )


class CombatantSnapshot(BaseModel):
    """Frozen view of a combatant at a point in time."""

    id: str = Field(description="Stable id of the combatant.")
    name: str = Field(description="Display name.")
    creature_id: str = Field(description="Id of the creature template.")
    team: Team = Field(description="Side the combatant fights for.")
    initiative: float = Field(default=0, description="Rolled initiative.")
    max_hp: float = Field(description="Maximum hit points.")
    state: CreatureStateSnapshot = Field(description="State at snapshot time.")

    @property
    def is_alive(self) -> bool:
        return self.state.current_hp > 0

    def __str__(self) -> str:
        color = "green" if self.is_alive else "red"
        bar = make_bar(self.state.current_hp, self.max_hp, color=color)
        return f"{self.team.colorize(self.name)} {bar} {self.state.current_hp:g}/{self.max_hp:g}"


class ActionRecord(BaseModel):
    """An action taken by a combatant during one round."""

    round: int = Field(description="Round the action was taken in.")
    action_id: str = Field(description="Id of the action.")
    action_name: str = Field(description="Name of the action.")
    target_ids: list[str] = Field(default_factory=list, description="Ids of the targets.")


class EncounterStats(BaseModel):
    """Per-combatant statistics accumulated during one encounter."""

    damage_dealt: float = Field(default=0, description="Damage dealt to others.")
    damage_taken: float = Field(default=0, description="Damage received.")
    healing_given: float = Field(default=0, description="Hit points restored to others.")
    healing_received: float = Field(default=0, description="Hit points restored.")
    buffs_applied: int = Field(default=0, description="Buffs applied to others.")
    times_unconscious: int = Field(default=0, description="Times dropped to 0 HP.")
    actions_used: int = Field(default=0, description="Actions resolved.")


# ==============================================================================
# LIVE STATE
# ==============================================================================


class CreatureState:
    """Mutable state of a combatant."""

    def __init__(self, creature: Creature, ledger: ResourceLedger | None = None) -> None:
        self.current_hp: float = creature.hp
        self.temp_hp: float = 0.0
        self.ward_hp: float = creature.max_arcane_ward_hp or 0.0
        self.buffs: dict[str, ActiveBuff] = {}
        self.concentrating_on: str | None = None
        self.ledger = ledger if ledger is not None else creature.initialize_ledger()
        # Uses of each trigger during the current encounter.
        self.trigger_uses: dict[str, int] = {}

    def snapshot(self) -> CreatureStateSnapshot:
        return CreatureStateSnapshot(
            current_hp=self.current_hp,
            temp_hp=self.temp_hp,
            ward_hp=self.ward_hp,
            buffs=[
                BuffSnapshot(
                    buff_id=active.buff_id,
                    name=active.name,
                    source_id=active.source_id,
                    remaining_rounds=active.remaining_rounds,
                )
                for active in self.buffs.values()
            ],
            concentrating_on=self.concentrating_on,
            resources=self.ledger.snapshot(),
            spent_weighted=self.ledger.spent_weighted,
        )


class Combatant:
    """One live instance of a creature inside an encounter."""

    def __init__(
        self,
        id: str,
        name: str,
        creature: Creature,
        team: Team,
        state: CreatureState | None = None,
    ) -> None:
        self.id = id
        self.name = name
        self.creature = creature
        self.team = team
        self.state = state if state is not None else CreatureState(creature)
        self.initiative: float = 0.0
        self.initial_state: CreatureStateSnapshot | None = None
        self.final_state: CreatureStateSnapshot | None = None
        self.actions_taken: list[ActionRecord] = []
        self.stats = EncounterStats()
        # Set while a reaction interrupts the action being resolved.
        self.action_interrupted = False

    # ==========================================================================
    # STATUS
    # ==========================================================================

    @property
    def max_hp(self) -> float:
        return self.creature.hp

    @property
    def hp(self) -> float:
        return self.state.current_hp

    @property
    def is_alive(self) -> bool:
        return self.state.current_hp > 0

    @property
    def missing_hp(self) -> float:
        return self.max_hp - self.state.current_hp

    @property
    def ac(self) -> float:
        return self.creature.ac + self.buff_average("ac")

    def conditions(self) -> set[CreatureCondition]:
        return {
            active.buff.condition
            for active in self.state.buffs.values()
            if active.buff.condition is not None
        }

    @property
    def is_incapacitated(self) -> bool:
        return any(active.buff.is_incapacitating for active in self.state.buffs.values())

    def has_buff(self, buff_id: str) -> bool:
        return buff_id in self.state.buffs

    # ==========================================================================
    # MODIFIERS
    # ==========================================================================

    def buff_total(self, attribute: str, rng: DiceRng, dice_multiplier: int = 1) -> float:
        """
        Rolls and sums a formula attribute over every active buff.

        Args:
            attribute (str): The Buff attribute, such as ``"to_hit"``.
            rng (DiceRng): The roller used for dice in the formulas.
            dice_multiplier (int): Dice multiplier, 2 on critical hits.

        Returns:
            float: The total.

        """
        total = 0.0
        for active in self.state.buffs.values():
            formula = getattr(active.buff, attribute)
            if formula is not None:
                total += roll_formula(formula, rng, dice_multiplier)
        return total

    def buff_average(self, attribute: str) -> float:
        """Sums the expected value of a formula attribute over every active buff."""
        total = 0.0
        for active in self.state.buffs.values():
            formula = getattr(active.buff, attribute)
            if formula is not None:
                total += average_formula(formula)
        return total

    def buff_multiplier(self, attribute: str) -> float:
        """Multiplies a multiplier attribute over every active buff."""
        result = 1.0
        for active in self.state.buffs.values():
            value = getattr(active.buff, attribute)
            if value is not None:
                result *= value
        return result

    def save_bonus(self, ability: Ability, rng: DiceRng) -> float:
        return self.creature.save_bonus_for(ability) + self.buff_total("save", rng)

    def triggers(self) -> Iterator[tuple[TriggerDefinition, str | None]]:
        """
        Yields every trigger the combatant owns, with the buff granting it.

        Yields:
            tuple[TriggerDefinition, str | None]: The trigger, and the id of
                the buff that grants it (None for innate triggers).

        """
        for trigger in self.creature.triggers:
            yield trigger, None
        for active in list(self.state.buffs.values()):
            for trigger in active.buff.triggers:
                yield trigger, active.buff_id

    # ==========================================================================
    # SNAPSHOTS
    # ==========================================================================

    def snapshot(self) -> CombatantSnapshot:
        return CombatantSnapshot(
            id=self.id,
            name=self.name,
            creature_id=self.creature.id,
            team=self.team,
            initiative=self.initiative,
            max_hp=self.max_hp,
            state=self.state.snapshot(),
        )

    def __repr__(self) -> str:
        return f"Combatant({self.id}, hp={self.hp:g}/{self.max_hp:g}, team={self.team})"

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Combatant) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)


def create_combatants(creatures: list[Creature], team: Team) -> list[Combatant]:
    """
    Instantiates every creature of a roster.

    Args:
        creatures (list[Creature]): The roster.
        team (Team): The side the combatants fight for.

    Returns:
        list[Combatant]: One combatant per creature instance, in roster order.

    """
    combatants = []
    for creature in creatures:
        for index, instance_id in enumerate(creature.instance_ids()):
            name = creature.name if creature.count == 1 else f"{creature.name} {index + 1}"
            combatants.append(Combatant(instance_id, name, creature, team))
    return combatants
