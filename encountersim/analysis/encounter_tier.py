"""
Encounter tier module for the analysis layer.

Classifies an encounter into a risk tier from its death percentiles and
the share of the daily budget it drains, and shifts that tier up when the
party walks in already depleted.
"""

from pydantic import BaseModel, Field

from encountersim.core.constants import EncounterTier


class EncounterMetrics(BaseModel):
    """Death percentiles and resource drain of one encounter."""

    deaths_p1: int = Field(description="Deaths in the worst 1% of runs.")
    deaths_p50: int = Field(description="Deaths in the median run.")
    deaths_p99: int = Field(description="Deaths in the best 1% of runs.")
    resource_drain_percent: float = Field(description="Daily budget drained, 0 to 100.")
    party_size: int = Field(description="Players in the party.")

    def classify(self) -> EncounterTier:
        """
        Classifies the encounter in isolation.

        Boundary values go to the safer tier. A worst case where the whole
        party goes down, or numbers matching no tier, mean FAILED.

        Returns:
            EncounterTier: The tier.

        """
        drain = self.resource_drain_percent
        if self.deaths_p1 >= self.party_size:
            return EncounterTier.FAILED
        if self.deaths_p99 == 0 and self.deaths_p50 == 0 and self.deaths_p1 == 0 and drain < 10:
            return EncounterTier.TRIVIAL
        if (
            self.deaths_p99 == 0
            and self.deaths_p50 == 0
            and self.deaths_p1 <= 1
            and 10 <= drain <= 30
        ):
            return EncounterTier.SAFE
        if (
            self.deaths_p99 <= 1
            and self.deaths_p50 <= 1
            and self.deaths_p1 <= 2
            and 30 <= drain <= 50
        ):
            return EncounterTier.CHALLENGING
        if (
            self.deaths_p99 <= 2
            and 1 <= self.deaths_p50 <= 3
            and self.deaths_p1 <= 4
            and 50 <= drain <= 80
        ):
            return EncounterTier.BOSS
        return EncounterTier.FAILED


def depletion_penalty(resources_remaining_percent: float) -> int:
    """Returns how many tiers harder an encounter gets with the given resources left."""
    if resources_remaining_percent >= 85:
        return 0
    if resources_remaining_percent >= 70:
        return 1
    if resources_remaining_percent >= 40:
        return 2
    return 3


def contextual_tier(isolated: EncounterTier, resources_remaining_percent: float) -> EncounterTier:
    """
    Shifts an isolated tier by the depletion of the party.

    Args:
        isolated (EncounterTier): The tier at full resources.
        resources_remaining_percent (float): Daily budget left when the
            encounter starts, 0 to 100.

    Returns:
        EncounterTier: The tier at the encounter's position in the day.

    """
    return isolated.shifted(depletion_penalty(resources_remaining_percent))


def deaths_percentiles(deaths: list[int]) -> tuple[int, int, int]:
    """
    Picks the worst 1%, median and best 1% death counts.

    Args:
        deaths (list[int]): Deaths per run, in any order.

    Returns:
        tuple[int, int, int]: (p1, p50, p99), p1 being the worst outcome.

    """
    if not deaths:
        return 0, 0, 0
    ordered = sorted(deaths, reverse=True)
    last = len(ordered) - 1
    return (
        ordered[min(last, len(ordered) // 100)],
        ordered[min(last, len(ordered) // 2)],
        ordered[min(last, (len(ordered) * 99) // 100)],
    )
