"""
Timeline module for the simulator.

Defines the scenario a party runs through: an ordered sequence of combat
encounters and short rests. Each encounter owns its monster roster and the
surprise and pre-cast flags of both sides.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from encountersim.character.creature import Creature
from encountersim.core.constants import TargetRole


class Encounter(BaseModel):
    """One combat encounter."""

    name: str = Field(default="Encounter", description="Display name.")
    monsters: list[Creature] = Field(description="Monster roster, in roster order.")
    players_surprised: bool = Field(
        default=False,
        description="Whether the players lose their first round.",
    )
    monsters_surprised: bool = Field(
        default=False,
        description="Whether the monsters lose their first round.",
    )
    players_precast: bool = Field(
        default=False,
        description="Whether the players cast their buffs before the fight.",
    )
    monsters_precast: bool = Field(
        default=False,
        description="Whether the monsters cast their buffs before the fight.",
    )
    target_role: TargetRole = Field(
        default=TargetRole.STANDARD,
        description="Intended weight of the encounter in the adventuring day.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.monsters:
            raise ValueError("an encounter needs at least one monster")


class CombatStep(BaseModel):
    """A combat encounter in the timeline."""

    type: Literal["combat"] = "combat"
    encounter: Encounter = Field(description="The encounter fought.")


class ShortRestStep(BaseModel):
    """A short rest in the timeline."""

    type: Literal["short_rest"] = "short_rest"


TimelineStep = Annotated[Union[CombatStep, ShortRestStep], Field(discriminator="type")]


def combat_steps(timeline: list[TimelineStep]) -> list[Encounter]:
    """Returns the encounters of a timeline, in order."""
    return [step.encounter for step in timeline if isinstance(step, CombatStep)]


def short_rest_count(timeline: list[TimelineStep]) -> int:
    return sum(1 for step in timeline if isinstance(step, ShortRestStep))
