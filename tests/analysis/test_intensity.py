"""
Tests for effective hit points and intensity tiers.
"""

import pytest

from conftest import make_battle
from encountersim.analysis.intensity import (
    assess_intensity_tier,
    creatures_tdnw,
    daily_budget,
    party_tdnw,
    snapshot_ehp,
)
from encountersim.character.character_resources import (
    HIT_DIE_WEIGHT,
    SPELL_SLOT_BASE,
    SR_FEATURE_WEIGHT,
)
from encountersim.core.constants import IntensityTier


def test_snapshot_ehp_of_a_plain_fighter(fighter, goblin):
    """Test that a fighter without daily resources is worth its hit points."""
    battle = make_battle([fighter], [goblin])
    assert snapshot_ehp(battle.players[0].snapshot()) == 30


def test_daily_budget_counts_resources(cleric, goblin):
    """Test that slots, hit dice and features add to the daily budget."""
    battle = make_battle([cleric], [goblin])
    snapshot = battle.players[0].snapshot()
    expected = 24 + 3 * SPELL_SLOT_BASE + 3 * HIT_DIE_WEIGHT + SR_FEATURE_WEIGHT
    assert daily_budget(snapshot) == pytest.approx(expected)
    # Channel Divinity comes back on a short rest.
    assert daily_budget(snapshot, 1) == pytest.approx(expected + SR_FEATURE_WEIGHT)


def test_ehp_drops_with_spending(cleric, goblin):
    """Test that spending a slot and losing hit points lowers the EHP."""
    battle = make_battle([cleric], [goblin])
    member = battle.players[0]
    before = snapshot_ehp(member.snapshot())
    member.state.ledger.consume("SpellSlot(1)")
    member.state.current_hp -= 4
    assert snapshot_ehp(member.snapshot()) == pytest.approx(before - SPELL_SLOT_BASE - 4)


def test_party_tdnw_matches_creatures(fighter, cleric, goblin):
    """Test that the budget from snapshots matches the budget from definitions."""
    battle = make_battle([fighter, cleric], [goblin])
    snapshots = [member.snapshot() for member in battle.players]
    assert party_tdnw(snapshots, 1) == pytest.approx(creatures_tdnw([fighter, cleric], 1))


@pytest.mark.parametrize(
    "burned,expected",
    [
        (5, IntensityTier.TIER1),
        (20, IntensityTier.TIER2),
        (50, IntensityTier.TIER3),
        (80, IntensityTier.TIER4),
        (100, IntensityTier.TIER5),
    ],
)
def test_assess_intensity_tier(burned, expected):
    """Test the tiers for an encounter meant to take half the day."""
    assert assess_intensity_tier(burned, 100, total_weight=4, encounter_weight=2) == expected


def test_intensity_without_budget():
    """Test that a party with no budget is graded TIER1."""
    assert assess_intensity_tier(50, 0, 1, 1) == IntensityTier.TIER1
