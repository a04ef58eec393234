"""
Types module for the analysis layer.

Holds the models produced by the percentile analysis (per-bucket
statistics, vitals and the aggregate report) and the GameBalance
thresholds every classification reads from.
"""

from pydantic import BaseModel, Field

from encountersim.core.constants import (
    EncounterArchetype,
    EncounterLabel,
    EncounterTier,
    IntensityTier,
)
from encountersim.effects.event_system import Event


class GameBalance(BaseModel):
    """Fixed thresholds used to classify encounters."""

    # Archetypes.
    tpk_broken_threshold: float = Field(
        default=0.5,
        description="TPK risk above which the encounter is broken.",
    )
    volatility_high_threshold: float = Field(
        default=0.15,
        description="Volatility of a coin flip.",
    )
    coin_flip_lethality_threshold: float = Field(
        default=0.05,
        description="Lethality of a coin flip.",
    )
    tpk_meat_grinder_threshold: float = Field(
        default=0.1,
        description="TPK risk of a meat grinder.",
    )
    lethality_boss_threshold: float = Field(
        default=0.5,
        description="Lethality above a boss fight.",
    )
    lethality_elite_threshold: float = Field(default=0.3, description="Lethality of a boss fight.")
    lethality_standard_threshold: float = Field(
        default=0.15,
        description="Lethality of an elite challenge.",
    )
    lethality_skirmish_threshold: float = Field(
        default=0.05,
        description="Lethality of a standard fight.",
    )
    attrition_nova_trap_threshold: float = Field(
        default=0.2,
        description="Attrition below which a lethal fight is a trap.",
    )
    attrition_grind_high_threshold: float = Field(
        default=0.4,
        description="Attrition of a grind among elite fights.",
    )
    attrition_grind_low_threshold: float = Field(
        default=0.3,
        description="Attrition of a grind among standard fights.",
    )
    attrition_skirmish_threshold: float = Field(
        default=0.1,
        description="Attrition of a skirmish.",
    )
    # Volatility.
    is_volatile_threshold: float = Field(
        default=0.2,
        description="Volatility flagged in the vitals.",
    )
    # Intensity tiers, as multiples of the encounter's share of the daily budget.
    intensity_tier1_multiplier: float = Field(default=0.2, description="Upper bound of tier 1.")
    intensity_tier2_multiplier: float = Field(default=0.6, description="Upper bound of tier 2.")
    intensity_tier3_multiplier: float = Field(default=1.3, description="Upper bound of tier 3.")
    intensity_tier4_multiplier: float = Field(default=2.0, description="Upper bound of tier 4.")
    # Design rating.
    good_design_max_lethality: float = Field(
        default=0.4,
        description="Lethality of a well designed fight.",
    )
    good_design_min_attrition: float = Field(
        default=0.1,
        description="Attrition of a well designed fight.",
    )
    two_stars_max_lethality: float = Field(
        default=0.6,
        description="Lethality still worth two stars.",
    )


DEFAULT_BALANCE = GameBalance()


class CombatantVisualization(BaseModel):
    """State of a combatant at the end of a representative run."""

    name: str = Field(description="Display name.")
    max_hp: float = Field(description="Maximum hit points.")
    start_hp: float = Field(description="Hit points at the start of the encounter.")
    current_hp: float = Field(description="Hit points at the end of the encounter.")
    is_dead: bool = Field(description="Whether the combatant ended at 0 HP.")
    is_player: bool = Field(description="Whether the combatant is a player.")
    hp_percentage: float = Field(description="Remaining hit points, in percent.")


class RunMetrics(BaseModel):
    """Metrics of a single run, or of one encounter of it."""

    burned: float = Field(default=0, description="Effective hit points burned.")
    hp_lost: float = Field(default=0, description="Hit points lost by the party.")
    party_max_hp: float = Field(default=0, description="Sum of the party's maximum hit points.")
    survivors: int = Field(default=0, description="Players standing at the end.")
    deaths: int = Field(default=0, description="Players at 0 HP at the end.")
    duration: int = Field(default=0, description="Rounds fought.")
    is_win: bool = Field(default=False, description="Whether the players won.")
    ehp_timeline: list[float] = Field(
        default_factory=list,
        description="Effective hit points left, in percent of the daily budget, after each step.",
    )


class BucketStats(BaseModel):
    """Statistics of a contiguous bucket of score-sorted runs."""

    label: str = Field(description="Display label.")
    runs: int = Field(default=0, description="Number of runs in the bucket.")
    median_survivors: float = Field(default=0, description="Median players standing.")
    party_size: int = Field(default=0, description="Players in the party.")
    total_hp_lost: float = Field(default=0, description="Mean hit points lost.")
    hp_lost_percent: float = Field(
        default=0,
        description="Mean hit points lost, in percent of party max HP.",
    )
    win_rate: float = Field(default=0, description="Share of wins, in percent.")
    battle_duration_rounds: float = Field(default=0, description="Mean rounds fought.")
    resource_timeline: list[float] = Field(
        default_factory=list,
        description="Mean effective hit points left after each step, in percent.",
    )
    median_seed: int | None = Field(default=None, description="Seed of the median run.")
    median_run_visualization: list[CombatantVisualization] = Field(
        default_factory=list,
        description="End state of the median run.",
    )


class DecileStats(BucketStats):
    """One of the ten deciles, 1 being the worst."""

    decile: int = Field(description="Decile number, 0 for the global median.")


class QuintileStats(BucketStats):
    """One of the five quintiles, 1 being the worst."""

    quintile: int = Field(description="Quintile number.")


class Vitals(BaseModel):
    """Risk metrics derived from the whole distribution."""

    lethality_index: float = Field(
        default=0,
        description="Share of runs with at least one player down.",
    )
    tpk_risk: float = Field(default=0, description="Share of runs where every player went down.")
    attrition_score: float = Field(
        default=0,
        description="Share of the daily budget burned at P50.",
    )
    volatility_index: float = Field(default=0, description="Cost at P10 minus cost at P50.")
    doom_horizon: float = Field(
        default=0,
        description="Encounters like this one until the budget runs out.",
    )
    deaths_door_index: float = Field(
        default=0,
        description="Mean rounds with a player under 25% HP.",
    )
    archetype: EncounterArchetype = Field(
        default=EncounterArchetype.STANDARD,
        description="Archetype.",
    )
    is_volatile: bool = Field(default=False, description="Whether the volatility is high.")


class AggregateOutput(BaseModel):
    """Full analysis of a set of runs."""

    scenario_name: str = Field(description="Name of the scenario.")
    total_runs: int = Field(default=0, description="Number of runs analysed.")
    party_size: int = Field(default=0, description="Players in the party.")
    deciles: list[DecileStats] = Field(default_factory=list, description="The ten deciles.")
    global_median: DecileStats | None = Field(default=None, description="The median run.")
    decile_logs: list[list[Event]] = Field(
        default_factory=list,
        description="Event logs of the runs at P5, P15, ..., P50, ..., P95.",
    )
    battle_duration_rounds: float = Field(default=0, description="Rounds of the median run.")
    intensity_tier: IntensityTier = Field(
        default=IntensityTier.TIER1,
        description="Intensity tier.",
    )
    encounter_tier: EncounterTier | None = Field(default=None, description="Risk tier.")
    encounter_label: EncounterLabel = Field(default=EncounterLabel.STANDARD, description="Label.")
    analysis_summary: str = Field(default="No data.", description="One-line summary.")
    pacing_label: str = Field(default="Steady", description="How the fight feels at the table.")
    tuning_suggestions: list[str] = Field(default_factory=list, description="Tuning suggestions.")
    is_good_design: bool = Field(
        default=False,
        description="Whether the fight looks well designed.",
    )
    stars: int = Field(default=0, description="Star rating, 1 to 3.")
    tdnw: float = Field(default=0, description="Total daily net worth of the party.")
    num_encounters: int = Field(default=0, description="Combat encounters in the timeline.")
    vitals: Vitals | None = Field(default=None, description="Risk metrics.")
