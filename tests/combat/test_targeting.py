"""
Tests for the targeting policies.
"""

from conftest import make_battle, make_fighter
from encountersim.actions import AttackAction, BuffAction, HealAction
from encountersim.combat.targeting import get_targets, resolve_targets
from encountersim.core.constants import Side, TargetPolicy
from encountersim.effects.buff import ActiveBuff, Buff


def _attack(policy: TargetPolicy, targets: int = 1) -> AttackAction:
    return AttackAction(
        id="strike", name="Strike", to_hit="5", damage="1d6", targets=targets, target_policy=policy
    )


def test_least_hp_ties_go_to_roster_order(battle, player):
    """Test that equal candidates are picked in roster order."""
    targets = resolve_targets(player, _attack(TargetPolicy.ENEMY_LEAST_HP), [player],
                              battle.monsters)
    assert [t.id for t in targets] == ["goblin-1"]


def test_least_and_most_hp(battle, player):
    """Test that HP-based policies rank by current hit points."""
    battle.monsters[1].state.current_hp = 3
    least = resolve_targets(player, _attack(TargetPolicy.ENEMY_LEAST_HP), [player],
                            battle.monsters)
    most = resolve_targets(player, _attack(TargetPolicy.ENEMY_MOST_HP), [player],
                           battle.monsters)
    assert least[0].id == "goblin-2"
    assert most[0].id == "goblin-1"


def test_dead_candidates_are_skipped(battle, player):
    """Test that combatants at 0 HP are never targeted."""
    battle.monsters[0].state.current_hp = 0
    targets = resolve_targets(player, _attack(TargetPolicy.ENEMY_LEAST_HP, 2), [player],
                              battle.monsters)
    assert [t.id for t in targets] == ["goblin-2"]


def test_returns_fewer_targets_than_requested(battle, player):
    """Test that a small roster yields fewer targets instead of failing."""
    targets = get_targets(player, _attack(TargetPolicy.ENEMY_MOST_HP, 5), [player],
                          battle.monsters)
    assert targets == [(Side.ENEMY, 0), (Side.ENEMY, 1)]


def test_lowest_and_highest_ac():
    """Test that AC policies rank by armor class, buffs included."""
    battle = make_battle(
        [make_fighter()],
        [make_fighter("orc", ac=13), make_fighter("knight", ac=18)],
    )
    player = battle.players[0]
    lowest = resolve_targets(player, _attack(TargetPolicy.ENEMY_LOWEST_AC), [player],
                             battle.monsters)
    assert lowest[0].id == "orc"
    battle.monsters[0].state.buffs["shield"] = ActiveBuff(buff_id="shield", buff=Buff(ac=10))
    highest = resolve_targets(player, _attack(TargetPolicy.ENEMY_HIGHEST_AC), [player],
                              battle.monsters)
    assert highest[0].id == "orc"


def test_highest_dpr():
    """Test that the damage policy picks the hardest hitter."""
    battle = make_battle(
        [make_fighter()],
        [make_fighter("rat", damage="1d4"), make_fighter("ogre", damage="2d8+4")],
    )
    player = battle.players[0]
    targets = resolve_targets(player, _attack(TargetPolicy.ENEMY_HIGHEST_DPR), [player],
                              battle.monsters)
    assert targets[0].id == "ogre"


def test_self_policy(battle, player):
    """Test that a self-targeted action only targets the actor."""
    action = BuffAction(id="rage", name="Rage", target_policy=TargetPolicy.SELF, buff=Buff())
    assert resolve_targets(player, action, [player], battle.monsters) == [player]


def test_buff_skips_current_holders(cleric, fighter, goblin):
    """Test that a buff is not recast on a combatant that already holds it."""
    battle = make_battle([fighter, cleric], [goblin])
    caster = battle.players[1]
    bless = cleric.actions[1]
    battle.players[0].state.buffs["bless"] = ActiveBuff(buff_id="bless", buff=bless.buff)
    targets = resolve_targets(caster, bless, battle.players, battle.monsters)
    assert [t.id for t in targets] == ["cleric"]


def test_heal_picks_most_injured(cleric, fighter, goblin):
    """Test that healing skips uninjured allies and prefers the most injured."""
    battle = make_battle([fighter, cleric], [goblin])
    caster = battle.players[1]
    heal = cleric.actions[0]
    assert isinstance(heal, HealAction)
    assert resolve_targets(caster, heal, battle.players, battle.monsters) == []
    battle.players[0].state.current_hp = 10
    caster.state.current_hp = 20
    targets = resolve_targets(caster, heal, battle.players, battle.monsters)
    assert [t.id for t in targets] == ["fighter"]
