"""
Dice parser module for the simulator.

Provides a safe evaluator for dice formulas such as ``"2d6+3"`` or
``"1d8+1d4[Bless]-2"``, returning a full breakdown of every die rolled and
every flat modifier so that attacks can be audited after the fact.
"""

import re
from logging import debug
from typing import Union

from catchery import log_warning
from pydantic import BaseModel, Field

from encountersim.core.rng import DiceRng

# A formula is either a plain number or a dice expression.
Formula = Union[int, float, str]

# One signed term of a formula, optionally followed by a [Label].
TERM_PATTERN = re.compile(r"([+-]?)\s*([^+\-\[\]]+?)\s*(?:\[([^\]]*)\])?\s*(?=[+-]|$)")
DICE_PATTERN = re.compile(r"^(\d*)d(\d+)$", re.IGNORECASE)
NUMBER_PATTERN = re.compile(r"^\d+(\.\d+)?$")


class DieRoll(BaseModel):
    """A single die rolled while evaluating a formula."""

    sides: int = Field(description="Number of faces of the die.")
    value: int = Field(description="Face the die landed on.")


class NamedModifier(BaseModel):
    """A flat term of a formula, with the label it was given."""

    name: str = Field(description="Label of the modifier.")
    value: float = Field(description="Signed value of the modifier.")


class RollBreakdown(BaseModel):
    """Class to hold roll breakdown information."""

    total: float = Field(description="Total value of the formula.")
    formula: str = Field(description="The formula that was evaluated.")
    rolls: list[DieRoll] = Field(
        default_factory=list,
        description="Every die rolled, in order.",
    )
    modifiers: list[NamedModifier] = Field(
        default_factory=list,
        description="Flat modifiers and labelled dice subtotals.",
    )

    def dice_total(self) -> int:
        """Returns the sum of every die rolled."""
        return sum(roll.value for roll in self.rolls)

    def __str__(self) -> str:
        faces = ", ".join(f"d{r.sides}={r.value}" for r in self.rolls)
        return f"{self.formula} = {self.total:g} [{faces}]"


class _Term(BaseModel):
    sign: int
    count: int = 0
    sides: int = 0
    flat: float = 0.0
    label: str = ""


def _parse_terms(formula: Formula) -> list[_Term]:
    """
    Splits a formula into signed terms.

    Args:
        formula (Formula): The formula to split.

    Returns:
        list[_Term]: The parsed terms. Malformed terms are dropped.

    """
    if isinstance(formula, (int, float)):
        return [_Term(sign=1, flat=float(formula), label=str(formula))]
    text = formula.strip()
    if not text:
        return []
    terms: list[_Term] = []
    for match in TERM_PATTERN.finditer(text):
        sign_str, body, label = match.groups()
        if not body:
            continue
        sign = -1 if sign_str == "-" else 1
        body = body.strip().replace(" ", "")
        dice = DICE_PATTERN.match(body)
        if dice:
            count = int(dice.group(1)) if dice.group(1) else 1
            sides = int(dice.group(2))
            terms.append(_Term(sign=sign, count=count, sides=sides, label=label or body))
        elif NUMBER_PATTERN.match(body):
            terms.append(_Term(sign=sign, flat=float(body), label=label or body))
        else:
            log_warning(
                f"Ignoring malformed formula term '{body}'",
                {"formula": text, "term": body},
            )
    return terms


def evaluate_formula(
    formula: Formula,
    rng: DiceRng,
    dice_multiplier: int = 1,
) -> RollBreakdown:
    """
    Evaluates a formula, rolling its dice with the given roller.

    Args:
        formula (Formula): The formula to evaluate.
        rng (DiceRng): The roller used for every die.
        dice_multiplier (int): Multiplies the number of dice rolled, as on a
            critical hit. Flat terms are not multiplied. Defaults to 1.

    Returns:
        RollBreakdown: The total, together with every die and modifier.

    """
    breakdown = RollBreakdown(total=0.0, formula=str(formula))
    total = 0.0
    for term in _parse_terms(formula):
        if term.sides > 0:
            subtotal = 0
            for _ in range(term.count * max(dice_multiplier, 1)):
                value = rng.roll(term.sides)
                breakdown.rolls.append(DieRoll(sides=term.sides, value=value))
                subtotal += value
            total += term.sign * subtotal
            if term.label and not DICE_PATTERN.match(term.label):
                breakdown.modifiers.append(
                    NamedModifier(name=term.label, value=term.sign * subtotal)
                )
        else:
            total += term.sign * term.flat
            breakdown.modifiers.append(
                NamedModifier(name=term.label, value=term.sign * term.flat)
            )
    breakdown.total = total
    debug("Evaluated %s", breakdown)
    return breakdown


def roll_formula(formula: Formula, rng: DiceRng, dice_multiplier: int = 1) -> float:
    """Evaluates a formula and returns only its total."""
    return evaluate_formula(formula, rng, dice_multiplier).total


def average_formula(formula: Formula) -> float:
    """
    Computes the expected value of a formula.

    Args:
        formula (Formula): The formula.

    Returns:
        float: The expected value, where NdM averages to N * (M + 1) / 2.

    """
    total = 0.0
    for term in _parse_terms(formula):
        if term.sides > 0:
            total += term.sign * term.count * (term.sides + 1) / 2.0
        else:
            total += term.sign * term.flat
    return total


def max_formula(formula: Formula) -> float:
    """Computes the highest value a formula can produce."""
    total = 0.0
    for term in _parse_terms(formula):
        if term.sides > 0:
            value = term.count * term.sides
            total += value if term.sign > 0 else -term.count
        else:
            total += term.sign * term.flat
    return total


def parse_dice_pool(expression: str) -> dict[int, int]:
    """
    Parses a dice pool such as ``"3d10+2d8"`` into a sides to count mapping.

    Args:
        expression (str): The dice pool expression.

    Returns:
        dict[int, int]: Number of dice per die size.

    """
    pool: dict[int, int] = {}
    for term in _parse_terms(expression):
        if term.sides > 0 and term.sign > 0:
            pool[term.sides] = pool.get(term.sides, 0) + term.count
    return pool
