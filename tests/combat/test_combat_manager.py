"""
Tests for the encounter loop.
"""

from conftest import make_fighter
from encountersim.actions import AttackAction, Frequency
from encountersim.character.character_resources import usage_key
from encountersim.character.combatant import create_combatants
from encountersim.combat.combat_manager import CombatManager, run_encounter
from encountersim.core.config import SimulationConfig
from encountersim.core.constants import FrequencyKind, Team
from encountersim.core.rng import DiceRng
from encountersim.effects.event_log import EventLog
from encountersim.effects.event_system import (
    ActionSkipped,
    ActionStarted,
    EncounterEnded,
    EncounterStarted,
    ResourceRestored,
    RoundStarted,
)
from encountersim.simulation.timeline import Encounter


def _manager(players, monsters, seed=1, config=None, **encounter_fields):
    return CombatManager(
        create_combatants(players, Team.PLAYERS),
        create_combatants(monsters, Team.MONSTERS),
        Encounter(monsters=monsters, **encounter_fields),
        DiceRng(seed),
        EventLog(),
        config or SimulationConfig(),
    )


def test_encounter_runs_to_a_winner(fighter, goblin):
    """Test that an encounter ends when one side is down."""
    manager = _manager([fighter], [goblin])
    result = manager.run()
    final = result.final_round
    assert result.reason == "side defeated"
    assert result.rounds_fought == len(result.rounds)
    if result.winner == Team.PLAYERS:
        assert final.alive(Team.PLAYERS) and not final.alive(Team.MONSTERS)
    else:
        assert final.alive(Team.MONSTERS) and not final.alive(Team.PLAYERS)
    events = manager.battle.log.to_list()
    assert isinstance(events[0], EncounterStarted)
    assert isinstance(events[-1], EncounterEnded)


def test_round_limit_is_a_draw():
    """Test that harmless combatants stop at the round limit without a winner."""
    pacifist = make_fighter("monk", damage="0")
    statue = make_fighter("statue", damage="0")
    result = _manager([pacifist], [statue], config=SimulationConfig(max_rounds=3)).run()
    assert result.reason == "round limit"
    assert result.winner is None
    assert result.rounds_fought == 3


def test_turn_limit():
    """Test that the turn budget ends an encounter mid-round."""
    pacifist = make_fighter("monk", damage="0")
    statues = make_fighter("statue", damage="0", count=3)
    manager = _manager([pacifist], [statues], config=SimulationConfig(max_turns=5))
    result = manager.run()
    assert result.reason == "turn limit"
    assert manager.battle.turns == 5


def test_surprised_side_skips_first_round(fighter):
    """Test that a surprised side loses its turns in round 1 only."""
    dummy = make_fighter("dummy", hp=500, damage="0")
    manager = _manager([fighter], [dummy], config=SimulationConfig(max_rounds=2),
                       players_surprised=True)
    manager.run()
    events = manager.battle.log.to_list()
    skipped = [e for e in events if isinstance(e, ActionSkipped) and e.actor_id == "fighter"]
    assert [e.round for e in skipped] == [1]
    assert all(e.reason == "surprised" for e in skipped)
    attacks = [e for e in events if isinstance(e, ActionStarted) and e.actor_id == "fighter"]
    assert [e.round for e in attacks] == [2]


def test_precast_buffs(fighter, cleric, goblin):
    """Test that pre-cast buffs are paid for and cast before round 1."""
    manager = _manager([fighter, cleric], [goblin], players_precast=True)
    manager.run()
    events = manager.battle.log.to_list()
    precast = [
        e for e in events if isinstance(e, ActionStarted) and e.decision_trace == ["precast"]
    ]
    first_round = next(i for i, e in enumerate(events) if isinstance(e, RoundStarted))
    assert [e.action_id for e in precast] == ["bless"]
    assert events.index(precast[0]) < first_round
    assert manager.battle.players[1].state.ledger.get("SpellSlot(1)") <= 2


def test_initiative_ties_keep_roster_order():
    """Test that equal initiative keeps players before monsters."""
    manager = _manager([make_fighter("a")], [make_fighter("b")])
    manager.battle.rng.force_roll(20, 10)
    manager.battle.rng.force_roll(20, 10)
    manager._roll_initiative()
    assert [c.id for c in manager.order] == ["a", "b"]


def test_recharge_roll_restores_usage():
    """Test that a spent recharge action comes back on a high d6."""
    breath = AttackAction(
        id="breath",
        name="Breath",
        to_hit="13",
        damage="6d6",
        use_saves=True,
        frequency=Frequency(kind=FrequencyKind.RECHARGE, recharge_min=5),
    )
    manager = _manager([make_fighter()], [make_fighter("drake", actions=[breath])])
    drake = manager.battle.monsters[0]
    drake.state.ledger.consume(usage_key("breath"))
    manager.battle.rng.force_roll(6, 4)
    manager._roll_recharges(drake)
    assert not drake.state.ledger.has(usage_key("breath"))
    manager.battle.rng.force_roll(6, 5)
    manager._roll_recharges(drake)
    assert drake.state.ledger.has(usage_key("breath"))
    assert any(isinstance(e, ResourceRestored) for e in manager.battle.log.to_list())


def test_initial_snapshot_is_taken_before_fighting(fighter, goblin):
    """Test that the result keeps every combatant as it entered the encounter."""
    players = create_combatants([fighter], Team.PLAYERS)
    players[0].state.current_hp = 20
    result = run_encounter(
        players,
        create_combatants([goblin], Team.MONSTERS),
        Encounter(monsters=[goblin]),
        DiceRng(3),
        EventLog(),
        SimulationConfig(),
    )
    initial = {c.id: c for c in result.initial}
    assert initial["fighter"].state.current_hp == 20
    assert initial["goblin-1"].state.current_hp == 7


def test_guaranteed_hits_land_in_round_one():
    """Test that both sides damage each other in round 1 when every attack must hit."""
    knight = make_fighter("knight", hp=100, to_hit="100", damage="5")
    ogre = make_fighter("ogre", hp=100, to_hit="100", damage="5")
    manager = _manager([knight], [ogre], config=SimulationConfig(max_rounds=1))
    # No natural 1 can come up in round 1: both initiatives and both attacks are forced.
    for _ in range(4):
        manager.battle.rng.force_roll(20, 10)
    result = manager.run()
    first = result.rounds[0]
    assert first.round == 1
    assert first.team1[0].state.current_hp == 95
    assert first.team2[0].state.current_hp == 95
