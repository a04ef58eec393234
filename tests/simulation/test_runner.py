"""
Tests for single runs, short rests and the survey pass.
"""

from conftest import make_fighter
from encountersim.character.combatant import create_combatants
from encountersim.core.config import SimulationConfig
from encountersim.core.constants import Team
from encountersim.core.context import RunCache, SimulationContext
from encountersim.core.rng import DiceRng
from encountersim.effects.event_log import EventLog, damage_dealt, damage_taken
from encountersim.effects.event_system import EncounterStarted, RestTaken
from encountersim.simulation.runner import (
    run_monte_carlo,
    run_single_event_driven_simulation,
    run_single_lightweight_simulation,
    run_survey_pass,
    take_short_rest,
)
from encountersim.simulation.timeline import CombatStep, Encounter


def test_same_seed_same_run(skirmish):
    """Test that a seed fully determines a run."""
    players, timeline = skirmish
    first, _ = run_single_event_driven_simulation(players, timeline, seed=11)
    second, _ = run_single_event_driven_simulation(players, timeline, seed=11)
    assert first.score == second.score
    assert first.survivors() == second.survivors()
    assert first.duration() == second.duration()


def test_logging_does_not_change_the_outcome(skirmish):
    """Test that event-driven and lightweight runs of a seed agree."""
    players, timeline = skirmish
    for seed in range(10):
        full, events = run_single_event_driven_simulation(players, timeline, seed=seed)
        quiet, no_events = run_single_event_driven_simulation(players, timeline, False, seed=seed)
        lean = run_single_lightweight_simulation(players, timeline, seed)
        assert events and not no_events
        assert full.score == quiet.score == lean.final_score
        assert full.survivors() == lean.total_survivors


def test_disabled_logging_keeps_only_final_round(skirmish):
    """Test that a run without logging keeps one snapshot per encounter."""
    players, timeline = skirmish
    result, _ = run_single_event_driven_simulation(players, timeline, False, seed=2)
    assert all(len(encounter.rounds) == 1 for encounter in result.encounters)


def test_timeline_order(skirmish):
    """Test that encounters and rests happen in timeline order."""
    players, timeline = skirmish
    result, events = run_single_event_driven_simulation(players, timeline, seed=5)
    steps = [e for e in events if isinstance(e, (EncounterStarted, RestTaken))]
    assert isinstance(steps[0], EncounterStarted)
    assert isinstance(steps[1], RestTaken)
    assert isinstance(steps[2], EncounterStarted)
    assert [e.encounter_index for e in result.encounters] == [0, 1]
    assert result.short_rests == 1
    assert result.score == result.encounters[-1].score


def test_damage_conservation_over_a_run(skirmish):
    """Test that reported damage equals damage taken over a whole day."""
    players, timeline = skirmish
    for seed in range(5):
        _, events = run_single_event_driven_simulation(players, timeline, seed=seed)
        assert damage_dealt(events) == damage_taken(events)


def test_party_state_carries_over(fighter):
    """Test that the party enters an encounter as it left the previous one."""
    ogre = make_fighter("ogre", hp=20, damage="2d6")
    timeline = [
        CombatStep(encounter=Encounter(monsters=[ogre])),
        CombatStep(encounter=Encounter(monsters=[ogre])),
    ]
    result, _ = run_single_event_driven_simulation([fighter], timeline, seed=4)
    first, second = result.encounters
    after_first = first.final_round.team1[0].state.current_hp
    before_second = next(c for c in second.initial if c.id == "fighter").state.current_hp
    assert before_second == after_first


def test_short_rest_spends_hit_dice(cleric):
    """Test that a short rest heals with hit dice without overflowing."""
    party = create_combatants([cleric], Team.PLAYERS)
    member = party[0]
    member.state.current_hp = 5
    member.state.temp_hp = 4
    member.state.ledger.consume("ClassResource(Channel Divinity)")
    take_short_rest(party, DiceRng(1), EventLog())
    assert 5 < member.hp <= member.max_hp
    assert member.state.ledger.get("HitDice(D8)") < 3
    assert member.state.temp_hp == 0
    assert member.state.ledger.has("ClassResource(Channel Divinity)")


def test_short_rest_wakes_the_fallen(fighter):
    """Test that a member at 0 HP wakes up at 1 HP."""
    party = create_combatants([fighter], Team.PLAYERS)
    party[0].state.current_hp = 0
    take_short_rest(party, DiceRng(1), EventLog())
    assert party[0].hp == 1


def test_short_rest_keeps_dice_when_healthy(cleric):
    """Test that no hit die is spent when its average heal would overflow."""
    party = create_combatants([cleric], Team.PLAYERS)
    party[0].state.current_hp = 22
    take_short_rest(party, DiceRng(1), EventLog())
    assert party[0].state.ledger.get("HitDice(D8)") == 3


def test_survey_pass_uses_consecutive_seeds(skirmish):
    """Test that the survey runs one lightweight run per seed."""
    players, timeline = skirmish
    runs = run_survey_pass(players, timeline, 20, 100)
    assert [run.seed for run in runs] == list(range(100, 120))


def test_survey_pass_with_threads_matches_serial(skirmish):
    """Test that a threaded survey gives the same runs as a serial one."""
    players, timeline = skirmish
    serial = run_survey_pass(players, timeline, 30)
    threaded = run_survey_pass(players, timeline, 30, config=SimulationConfig(max_workers=4))
    assert serial == threaded


def test_survey_pass_cache(skirmish):
    """Test that a second survey of the same scenario is served from the cache."""
    players, timeline = skirmish
    cache = RunCache(1000)
    first = run_survey_pass(players, timeline, 15, cache=cache)
    assert cache.misses == 15
    second = run_survey_pass(players, timeline, 15, cache=cache)
    assert cache.hits == 15
    assert first == second


def test_monte_carlo_keeps_event_logs(skirmish):
    """Test that every Monte Carlo run carries its own event log."""
    players, timeline = skirmish
    runs = run_monte_carlo(players, timeline, 5, seed=3)
    assert [run.result.seed for run in runs] == [3, 4, 5, 6, 7]
    assert all(run.events for run in runs)


def test_context_takes_precedence_over_seed(skirmish):
    """Test that an explicit context decides the seed of a run."""
    players, timeline = skirmish
    result, _ = run_single_event_driven_simulation(
        players, timeline, seed=1, context=SimulationContext(9)
    )
    assert result.seed == 9
