"""
Template action module for the simulator.

Defines named area effects, such as a breath weapon, which roll their damage
once and apply it uniformly to every target, each of which saves on its own.
"""

from typing import Literal

from pydantic import Field

from encountersim.actions.base_action import BaseAction
from encountersim.core.constants import Ability, TargetPolicy
from encountersim.core.dice_parser import Formula
from encountersim.effects.buff import Buff


class TemplateAction(BaseAction):
    """A named area effect resolved uniformly against several targets."""

    type: Literal["template"] = "template"
    target_policy: TargetPolicy = TargetPolicy.ENEMY_MOST_HP
    template_name: str = Field(description="Name of the effect, such as 'Fire Breath'.")
    damage: Formula | None = Field(default=None, description="Damage rolled once for all targets.")
    save_dc: float = Field(description="DC every target saves against.")
    save_ability: Ability = Field(default=Ability.DEX, description="Ability used for the save.")
    half_on_save: bool = Field(
        default=True,
        description="Half damage on a successful save, otherwise the save negates it.",
    )
    buff_id: str | None = Field(
        default=None,
        description="Id of the buff imposed on targets that fail the save.",
    )
    buff: Buff | None = Field(
        default=None,
        description="Buff imposed on targets that fail the save.",
    )
