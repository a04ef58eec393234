"""
Attack action module for the simulator.

Defines weapon and spell attacks: an attack roll against armor class (or a
saving throw against a DC when the attack uses saves), a damage formula and
an optional rider effect imposed on the target when it fails a save.
"""

from typing import Literal

from pydantic import BaseModel, Field

from encountersim.actions.base_action import BaseAction
from encountersim.core.constants import Ability, TargetPolicy
from encountersim.core.dice_parser import Formula
from encountersim.effects.buff import Buff


class RiderEffect(BaseModel):
    """A buff imposed on a target hit by an attack, unless it saves."""

    buff_id: str = Field(description="Id of the imposed buff.")
    buff: Buff = Field(description="The imposed buff.")
    dc: float = Field(description="DC of the saving throw against the rider.")
    ability: Ability = Field(default=Ability.CON, description="Ability used for the save.")


class AttackAction(BaseAction):
    """An attack against one or more enemies."""

    type: Literal["attack"] = "attack"
    target_policy: TargetPolicy = TargetPolicy.ENEMY_LEAST_HP
    to_hit: Formula = Field(
        description="Attack bonus, or the DC when the attack uses saves.",
    )
    damage: Formula = Field(description="Damage formula.")
    use_saves: bool = Field(
        default=False,
        description="Whether targets save against to_hit instead of being rolled against.",
    )
    save_ability: Ability = Field(
        default=Ability.DEX,
        description="Ability used when the attack uses saves.",
    )
    half_on_save: bool = Field(
        default=False,
        description="Whether a successful save still takes half damage.",
    )
    rider: RiderEffect | None = Field(
        default=None,
        description="Effect imposed on a target that is hit.",
    )
