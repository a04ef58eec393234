"""
Tests for the dice parser and the seeded dice roller.
"""

import logging

import pytest

from encountersim.core.dice_parser import (
    average_formula,
    evaluate_formula,
    max_formula,
    parse_dice_pool,
    roll_formula,
)
from encountersim.core.rng import DiceRng


def test_flat_formula():
    """Test that numbers evaluate to themselves without rolling."""
    rng = DiceRng(1)
    assert roll_formula(5, rng) == 5
    assert roll_formula("7", rng) == 7
    assert roll_formula(2.5, rng) == 2.5


def test_dice_formula_breakdown():
    """Test that every die and flat modifier ends up in the breakdown."""
    rng = DiceRng(1)
    rng.force_roll(8, 6)
    rng.force_roll(4, 3)
    breakdown = evaluate_formula("1d8+1d4[Bless]+3", rng)
    assert breakdown.total == 12
    assert [roll.value for roll in breakdown.rolls] == [6, 3]
    assert breakdown.dice_total() == 9
    names = {modifier.name: modifier.value for modifier in breakdown.modifiers}
    assert names == {"Bless": 3, "3": 3}


def test_negative_terms():
    """Test that subtracted terms lower the total."""
    rng = DiceRng(1)
    rng.force_roll(6, 4)
    assert roll_formula("1d6-2", rng) == 2


def test_critical_doubles_dice_only():
    """Test that the dice multiplier doubles dice but not flat bonuses."""
    rng = DiceRng(1)
    rng.force_roll(6, 6)
    rng.force_roll(6, 6)
    breakdown = evaluate_formula("1d6+6", rng, dice_multiplier=2)
    assert len(breakdown.rolls) == 2
    assert breakdown.total == 18


def test_malformed_term_is_ignored():
    """Test that a malformed term is dropped and the rest still evaluates."""
    rng = DiceRng(1)
    assert roll_formula("3+abc", rng) == 3


def test_average_and_max():
    """Test the expected and maximum values of a formula."""
    assert average_formula("2d6+3") == 10
    assert average_formula("1d4") == 2.5
    assert max_formula("2d6+3") == 15
    assert max_formula(4) == 4


def test_parse_dice_pool():
    """Test that a hit dice pool is grouped by die size."""
    assert parse_dice_pool("3d10+2d8+1d10") == {10: 4, 8: 2}
    assert parse_dice_pool("") == {}


def test_same_seed_same_rolls():
    """Test that two rollers with the same seed produce the same sequence."""
    first, second = DiceRng(42), DiceRng(42)
    assert [first.roll(20) for _ in range(50)] == [second.roll(20) for _ in range(50)]
    assert first.seed == 42


def test_rolls_stay_on_the_die():
    """Test that every roll lands on a face of the die."""
    rng = DiceRng(3)
    values = {rng.roll(6) for _ in range(500)}
    assert values == {1, 2, 3, 4, 5, 6}


def test_force_roll_matches_die_size():
    """Test that a forced roll is only consumed by a die of the same size."""
    rng = DiceRng(1)
    rng.force_roll(20, 15)
    rng.roll(6)
    assert rng.roll(20) == 15


def test_force_roll_rejects_invalid_faces():
    """Test that impossible forced values are refused."""
    rng = DiceRng(1)
    with pytest.raises(ValueError):
        rng.force_roll(6, 7)
    with pytest.raises(ValueError):
        rng.force_roll(0, 1)


def test_advantage_keeps_highest():
    """Test that advantage keeps the higher of two d20s."""
    rng = DiceRng(1)
    rng.force_roll(20, 4)
    rng.force_roll(20, 17)
    kept, dice = rng.roll_d20_with(True, False)
    assert kept == 17
    assert dice == [4, 17]


def test_advantage_and_disadvantage_cancel():
    """Test that advantage and disadvantage together roll a single die."""
    rng = DiceRng(1)
    rng.force_roll(20, 9)
    kept, dice = rng.roll_d20_with(True, True)
    assert kept == 9
    assert dice == [9]


def test_evaluation_is_logged_lazily(caplog):
    """Test that the breakdown is only formatted when the debug record is emitted."""
    rng = DiceRng(1)
    rng.force_roll(8, 6)
    with caplog.at_level(logging.DEBUG):
        evaluate_formula("1d8+3", rng)
    record = next(r for r in caplog.records if r.msg == "Evaluated %s")
    assert "d8=6" in record.getMessage()
