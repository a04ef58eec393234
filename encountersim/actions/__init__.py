"""
Actions package for the simulator.

The Action type is a closed union of every action variant, discriminated by
the ``type`` field.
"""

from typing import Annotated, Union

from pydantic import Field

from encountersim.actions.attack_action import AttackAction, RiderEffect
from encountersim.actions.base_action import ActionCost, BaseAction, Frequency
from encountersim.actions.buff_action import BuffAction, DebuffAction
from encountersim.actions.heal_action import HealAction
from encountersim.actions.template_action import TemplateAction

Action = Annotated[
    Union[AttackAction, HealAction, BuffAction, DebuffAction, TemplateAction],
    Field(discriminator="type"),
]

__all__ = [
    "Action",
    "ActionCost",
    "AttackAction",
    "BaseAction",
    "BuffAction",
    "DebuffAction",
    "Frequency",
    "HealAction",
    "RiderEffect",
    "TemplateAction",
]
