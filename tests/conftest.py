"""
Shared fixtures for the encounter simulator tests.
"""

import pytest

from encountersim.actions import ActionCost, AttackAction, BuffAction, HealAction
from encountersim.character.combatant import Combatant, create_combatants
from encountersim.character.creature import Creature
from encountersim.combat.battle_state import BattleState
from encountersim.core.config import SimulationConfig
from encountersim.core.constants import BuffDuration, ResourceKind, TargetPolicy, Team
from encountersim.core.rng import DiceRng
from encountersim.effects.buff import Buff
from encountersim.effects.event_log import EventLog
from encountersim.simulation.timeline import CombatStep, Encounter, ShortRestStep


def make_fighter(
    id: str = "fighter",
    hp: float = 30,
    ac: float = 15,
    to_hit: str = "5",
    damage: str = "1d8+3",
    actions: list | None = None,
    **kwargs,
) -> Creature:
    if actions is None:
        actions = [AttackAction(id=f"{id}-strike", name="Strike", to_hit=to_hit, damage=damage)]
    return Creature(id=id, name=id.capitalize(), hp=hp, ac=ac, actions=actions, **kwargs)


def make_battle(
    players: list[Creature],
    monsters: list[Creature],
    seed: int = 1,
    config: SimulationConfig | None = None,
) -> BattleState:
    return BattleState(
        create_combatants(players, Team.PLAYERS),
        create_combatants(monsters, Team.MONSTERS),
        DiceRng(seed),
        EventLog(),
        config or SimulationConfig(),
    )


@pytest.fixture
def fighter():
    return make_fighter()


@pytest.fixture
def goblin():
    return make_fighter("goblin", hp=7, ac=13, to_hit="4", damage="1d6+2", count=2)


@pytest.fixture
def cleric():
    return Creature(
        id="cleric",
        name="Cleric",
        hp=24,
        ac=16,
        spell_slots={1: 3},
        class_resources={"Channel Divinity": 1},
        hit_dice="3d8",
        con_modifier=1,
        actions=[
            HealAction(
                id="cure-wounds",
                name="Cure Wounds",
                amount="1d8+3",
                target_policy=TargetPolicy.ALLY_MOST_INJURED,
                cost=[ActionCost(kind=ResourceKind.SPELL_SLOT, detail=1)],
            ),
            BuffAction(
                id="bless",
                name="Bless",
                targets=3,
                target_policy=TargetPolicy.ALLY_LEAST_HP,
                cost=[ActionCost(kind=ResourceKind.SPELL_SLOT, detail=1)],
                buff=Buff(
                    display_name="Bless",
                    duration=BuffDuration.ENTIRE_ENCOUNTER,
                    to_hit="1d4",
                    save="1d4",
                    concentration=True,
                ),
            ),
            AttackAction(id="mace", name="Mace", to_hit="4", damage="1d6+2"),
        ],
    )


@pytest.fixture
def battle(fighter, goblin):
    return make_battle([fighter], [goblin])


@pytest.fixture
def player(battle) -> Combatant:
    return battle.players[0]


@pytest.fixture
def monster(battle) -> Combatant:
    return battle.monsters[0]


@pytest.fixture
def skirmish(fighter, cleric, goblin):
    """A party of two against goblins, twice, with a short rest in between."""
    players = [fighter, cleric]
    timeline = [
        CombatStep(encounter=Encounter(name="Ambush", monsters=[goblin])),
        ShortRestStep(),
        CombatStep(encounter=Encounter(name="Camp", monsters=[goblin], players_precast=True)),
    ]
    return players, timeline
