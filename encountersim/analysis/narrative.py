"""
Narrative module for the analysis layer.

Turns vitals into words: the archetype of an encounter, its designer-facing
label, a one-line summary, tuning suggestions and a star rating.
"""

from encountersim.analysis.types import DEFAULT_BALANCE, BucketStats, GameBalance, Vitals
from encountersim.core.constants import EncounterArchetype, EncounterLabel

ARCHETYPE_LABELS = {
    EncounterArchetype.BROKEN: EncounterLabel.BROKEN,
    EncounterArchetype.MEAT_GRINDER: EncounterLabel.TPK_RISK,
    EncounterArchetype.COIN_FLIP: EncounterLabel.TPK_RISK,
    EncounterArchetype.BOSS_FIGHT: EncounterLabel.EPIC_CHALLENGE,
    EncounterArchetype.ELITE_CHALLENGE: EncounterLabel.TACTICAL_GRINDER,
    EncounterArchetype.THE_GRIND: EncounterLabel.THE_SLOG,
    EncounterArchetype.NOVA_TRAP: EncounterLabel.THE_TRAP,
    EncounterArchetype.SKIRMISH: EncounterLabel.ACTION_MOVIE,
    EncounterArchetype.STANDARD: EncounterLabel.STANDARD,
    EncounterArchetype.TRIVIAL: EncounterLabel.TRIVIAL_MINIONS,
}

TUNING_SUGGESTIONS = {
    EncounterArchetype.BROKEN: "Expected wipe. Reduce monster damage or count.",
    EncounterArchetype.MEAT_GRINDER: "Extremely lethal, with a real chance of a total party kill.",
    EncounterArchetype.COIN_FLIP: "Outcomes swing wildly. Lower burst damage.",
    EncounterArchetype.NOVA_TRAP: "Burst damage threat. Consider spreading damage across rounds.",
    EncounterArchetype.TRIVIAL: "Under-tuned. Increase monster stats for more impact.",
}


def assess_archetype(vitals: Vitals, balance: GameBalance = DEFAULT_BALANCE) -> EncounterArchetype:
    """
    Classifies an encounter from its vitals.

    Args:
        vitals (Vitals): The vitals.
        balance (GameBalance): The thresholds.

    Returns:
        EncounterArchetype: The archetype.

    """
    lethality = vitals.lethality_index
    attrition = vitals.attrition_score
    if vitals.tpk_risk > balance.tpk_broken_threshold:
        return EncounterArchetype.BROKEN
    if (
        vitals.volatility_index > balance.volatility_high_threshold
        and lethality > balance.coin_flip_lethality_threshold
    ):
        return EncounterArchetype.COIN_FLIP
    if vitals.tpk_risk > balance.tpk_meat_grinder_threshold:
        return EncounterArchetype.MEAT_GRINDER
    if lethality > balance.lethality_boss_threshold:
        return EncounterArchetype.MEAT_GRINDER
    if lethality > balance.lethality_elite_threshold:
        if attrition < balance.attrition_nova_trap_threshold:
            return EncounterArchetype.NOVA_TRAP
        return EncounterArchetype.BOSS_FIGHT
    if lethality > balance.lethality_standard_threshold:
        if attrition > balance.attrition_grind_high_threshold:
            return EncounterArchetype.THE_GRIND
        return EncounterArchetype.ELITE_CHALLENGE
    if lethality > balance.lethality_skirmish_threshold:
        if attrition > balance.attrition_grind_low_threshold:
            return EncounterArchetype.THE_GRIND
        return EncounterArchetype.STANDARD
    if attrition > balance.attrition_skirmish_threshold:
        return EncounterArchetype.SKIRMISH
    return EncounterArchetype.TRIVIAL


def encounter_label(archetype: EncounterArchetype) -> EncounterLabel:
    return ARCHETYPE_LABELS[archetype]


def analysis_summary(vitals: Vitals, typical: BucketStats) -> str:
    """Returns a one-line summary of the archetype, attrition and typical survivors."""
    archetype = vitals.archetype
    return (
        f"{archetype.display_name}: {archetype.description} | "
        f"Attrition: {round(vitals.attrition_score * 100)}% | "
        f"Typical Survivors: {typical.median_survivors:g}/{typical.party_size}"
    )


def tuning_suggestions(archetype: EncounterArchetype) -> list[str]:
    suggestion = TUNING_SUGGESTIONS.get(archetype)
    return [suggestion] if suggestion else []


def is_good_design(vitals: Vitals, balance: GameBalance = DEFAULT_BALANCE) -> bool:
    """A fight is well designed when it is survivable but still costs something."""
    return (
        vitals.lethality_index < balance.good_design_max_lethality
        and vitals.attrition_score > balance.good_design_min_attrition
    )


def star_rating(vitals: Vitals, balance: GameBalance = DEFAULT_BALANCE) -> int:
    """Rates an encounter from 1 to 3 stars."""
    if is_good_design(vitals, balance):
        return 3
    if vitals.lethality_index < balance.two_stars_max_lethality:
        return 2
    return 1


def pacing_label(vitals: Vitals) -> str:
    """Returns a short word describing how the encounter feels at the table."""
    if vitals.volatility_index > 0.2:
        return "Chaotic"
    if vitals.lethality_index > 0.4 and vitals.attrition_score < 0.2:
        return "Sudden Death"
    if vitals.lethality_index < 0.1 and vitals.attrition_score > 0.4:
        return "War of Attrition"
    if vitals.lethality_index > 0.3 and vitals.attrition_score > 0.3:
        return "Epic"
    if vitals.lethality_index < 0.05 and vitals.attrition_score < 0.1:
        return "Breezy"
    return "Steady"
