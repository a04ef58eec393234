"""
Buff action module for the simulator.

Defines actions that attach a buff to allies, and debuffs that attach a
buff to enemies who fail a saving throw.
"""

from typing import Literal

from pydantic import Field

from encountersim.actions.base_action import BaseAction
from encountersim.core.constants import Ability, TargetPolicy
from encountersim.effects.buff import Buff


class BuffAction(BaseAction):
    """Attaches a buff to each target."""

    type: Literal["buff"] = "buff"
    target_policy: TargetPolicy = TargetPolicy.ALLY_HIGHEST_DPR
    buff: Buff = Field(description="The buff attached to each target.")


class DebuffAction(BaseAction):
    """Attaches a buff to each target that fails a saving throw."""

    type: Literal["debuff"] = "debuff"
    target_policy: TargetPolicy = TargetPolicy.ENEMY_HIGHEST_DPR
    buff: Buff = Field(description="The buff attached to each target that fails.")
    save_dc: float = Field(description="DC of the saving throw.")
    save_ability: Ability = Field(default=Ability.WIS, description="Ability used for the save.")
