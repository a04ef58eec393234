"""
Heal action module for the simulator.

Defines healing, which restores hit points up to the maximum or grants
temporary hit points.
"""

from typing import Literal

from pydantic import Field

from encountersim.actions.base_action import BaseAction
from encountersim.core.constants import TargetPolicy
from encountersim.core.dice_parser import Formula


class HealAction(BaseAction):
    """Restores hit points, or grants temporary hit points, to allies."""

    type: Literal["heal"] = "heal"
    target_policy: TargetPolicy = TargetPolicy.ALLY_MOST_INJURED
    amount: Formula = Field(description="Healing formula.")
    temp_hp: bool = Field(
        default=False,
        description="Whether the amount is granted as temporary hit points.",
    )
