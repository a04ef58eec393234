"""
Tests for creature templates and the combatants built from them.
"""

import pytest

from conftest import make_fighter
from encountersim.actions import AttackAction
from encountersim.character.combatant import create_combatants
from encountersim.character.creature import Creature, hit_chance
from encountersim.core.constants import Ability, BuffDuration, Team
from encountersim.effects.buff import ActiveBuff, Buff


def test_creature_validation():
    """Test that impossible creatures are refused."""
    with pytest.raises(ValueError):
        Creature(id="", name="Nobody", hp=10, ac=10)
    with pytest.raises(ValueError):
        Creature(id="x", name="X", hp=0, ac=10)
    with pytest.raises(ValueError):
        Creature(id="x", name="X", hp=5, ac=10, count=0)
    strike = AttackAction(id="strike", name="Strike", to_hit="1", damage="1")
    with pytest.raises(ValueError):
        Creature(id="x", name="X", hp=5, ac=10, actions=[strike, strike])


def test_creature_parses_actions_from_dicts():
    """Test that actions are built from plain data through their type tag."""
    creature = Creature.model_validate(
        {
            "id": "ogre",
            "name": "Ogre",
            "hp": 59,
            "ac": 11,
            "actions": [
                {"type": "attack", "id": "club", "name": "Club", "to_hit": "6", "damage": "2d8+4"}
            ],
        }
    )
    assert isinstance(creature.actions[0], AttackAction)


def test_save_overrides():
    """Test that per-ability saves override the default bonus."""
    creature = make_fighter(save_bonus=1, saves={Ability.DEX: 5})
    assert creature.save_bonus_for(Ability.DEX) == 5
    assert creature.save_bonus_for(Ability.WIS) == 1


def test_hit_chance_bounds():
    """Test that a natural 1 always misses and a natural 20 always hits."""
    assert hit_chance(0, 30) == pytest.approx(0.05)
    assert hit_chance(30, 5) == pytest.approx(0.95)
    assert hit_chance(5, 15) == pytest.approx(0.55)


def test_estimated_dpr_uses_best_action():
    """Test that the damage estimate uses the best action of each slot."""
    weak = make_fighter(damage="1d4")
    strong = make_fighter(damage="2d6+4")
    assert strong.estimated_dpr() > weak.estimated_dpr() > 0


def test_create_combatants_expands_count(goblin, fighter):
    """Test that a creature with a count yields one combatant per instance."""
    combatants = create_combatants([fighter, goblin], Team.MONSTERS)
    assert [c.id for c in combatants] == ["fighter", "goblin-1", "goblin-2"]
    assert [c.name for c in combatants] == ["Fighter", "Goblin 1", "Goblin 2"]
    assert all(c.team == Team.MONSTERS for c in combatants)


def test_combatant_starts_full(fighter):
    """Test that a fresh combatant has full HP and its own ledger."""
    first, second = create_combatants([fighter, fighter.model_copy(update={"id": "other"})],
                                      Team.PLAYERS)
    assert first.hp == first.max_hp == 30
    first.state.ledger.consume("Action")
    assert second.state.ledger.has("Action")


def test_combatant_modifiers(player):
    """Test that buff modifiers are summed and multiplied over active buffs."""
    player.state.buffs["shield"] = ActiveBuff(buff_id="shield", buff=Buff(ac=5))
    player.state.buffs["rage"] = ActiveBuff(
        buff_id="rage",
        buff=Buff(damage_taken_multiplier=0.5, duration=BuffDuration.N_ROUNDS, rounds=3),
    )
    assert player.ac == 20
    assert player.buff_multiplier("damage_taken_multiplier") == 0.5
    assert player.has_buff("shield")


def test_snapshot_reflects_state(player):
    """Test that a snapshot freezes HP, buffs and resources."""
    player.state.current_hp = 12
    player.state.ledger.consume("Action")
    snapshot = player.snapshot()
    player.state.current_hp = 1
    assert snapshot.state.current_hp == 12
    assert snapshot.state.resources["Action"].current == 0
    assert snapshot.is_alive
