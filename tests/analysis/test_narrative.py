"""
Tests for archetypes, labels and ratings.
"""

import pytest

from encountersim.analysis.narrative import (
    analysis_summary,
    assess_archetype,
    encounter_label,
    is_good_design,
    pacing_label,
    star_rating,
    tuning_suggestions,
)
from encountersim.analysis.types import BucketStats, GameBalance, Vitals
from encountersim.core.constants import EncounterArchetype, EncounterLabel


@pytest.mark.parametrize(
    "lethality,tpk,attrition,volatility,expected",
    [
        (0.9, 0.6, 0.5, 0.0, EncounterArchetype.BROKEN),
        (0.2, 0.0, 0.3, 0.2, EncounterArchetype.COIN_FLIP),
        (0.3, 0.15, 0.3, 0.0, EncounterArchetype.MEAT_GRINDER),
        (0.6, 0.0, 0.3, 0.0, EncounterArchetype.MEAT_GRINDER),
        (0.4, 0.0, 0.1, 0.0, EncounterArchetype.NOVA_TRAP),
        (0.4, 0.0, 0.3, 0.0, EncounterArchetype.BOSS_FIGHT),
        (0.2, 0.0, 0.5, 0.0, EncounterArchetype.THE_GRIND),
        (0.2, 0.0, 0.3, 0.0, EncounterArchetype.ELITE_CHALLENGE),
        (0.1, 0.0, 0.35, 0.0, EncounterArchetype.THE_GRIND),
        (0.1, 0.0, 0.2, 0.0, EncounterArchetype.STANDARD),
        (0.0, 0.0, 0.2, 0.0, EncounterArchetype.SKIRMISH),
        (0.0, 0.0, 0.05, 0.0, EncounterArchetype.TRIVIAL),
    ],
)
def test_assess_archetype(lethality, tpk, attrition, volatility, expected):
    """Test that vitals map to the expected archetype."""
    vitals = Vitals(
        lethality_index=lethality,
        tpk_risk=tpk,
        attrition_score=attrition,
        volatility_index=volatility,
    )
    assert assess_archetype(vitals) == expected


def test_boundaries_go_to_the_milder_archetype():
    """Test that a value equal to a threshold does not cross it."""
    vitals = Vitals(lethality_index=0.05, attrition_score=0.1)
    assert assess_archetype(vitals) == EncounterArchetype.TRIVIAL


def test_custom_balance():
    """Test that the thresholds come from the balance passed in."""
    vitals = Vitals(lethality_index=0.0, attrition_score=0.2)
    strict = GameBalance(attrition_skirmish_threshold=0.5)
    assert assess_archetype(vitals, strict) == EncounterArchetype.TRIVIAL


def test_every_archetype_has_a_label():
    """Test that every archetype maps to a label."""
    for archetype in EncounterArchetype:
        assert isinstance(encounter_label(archetype), EncounterLabel)
    assert encounter_label(EncounterArchetype.NOVA_TRAP) == EncounterLabel.THE_TRAP


def test_tuning_suggestions():
    """Test that only problematic archetypes get a suggestion."""
    assert tuning_suggestions(EncounterArchetype.BROKEN)
    assert tuning_suggestions(EncounterArchetype.STANDARD) == []


@pytest.mark.parametrize(
    "lethality,attrition,stars",
    [(0.1, 0.3, 3), (0.1, 0.05, 2), (0.5, 0.3, 2), (0.7, 0.3, 1)],
)
def test_star_rating(lethality, attrition, stars):
    """Test the star rating of an encounter."""
    vitals = Vitals(lethality_index=lethality, attrition_score=attrition)
    assert star_rating(vitals) == stars
    assert is_good_design(vitals) == (stars == 3)


@pytest.mark.parametrize(
    "lethality,attrition,volatility,expected",
    [
        (0.1, 0.3, 0.3, "Chaotic"),
        (0.5, 0.1, 0.0, "Sudden Death"),
        (0.05, 0.5, 0.0, "War of Attrition"),
        (0.35, 0.35, 0.0, "Epic"),
        (0.0, 0.05, 0.0, "Breezy"),
        (0.2, 0.2, 0.0, "Steady"),
    ],
)
def test_pacing_label(lethality, attrition, volatility, expected):
    """Test the pacing word of an encounter."""
    vitals = Vitals(
        lethality_index=lethality,
        attrition_score=attrition,
        volatility_index=volatility,
    )
    assert pacing_label(vitals) == expected


def test_analysis_summary():
    """Test that the summary names the archetype, attrition and survivors."""
    vitals = Vitals(attrition_score=0.234, archetype=EncounterArchetype.SKIRMISH)
    typical = BucketStats(label="Median", median_survivors=3, party_size=4)
    summary = analysis_summary(vitals, typical)
    assert summary.startswith(EncounterArchetype.SKIRMISH.display_name)
    assert "Attrition: 23%" in summary
    assert "Typical Survivors: 3/4" in summary
