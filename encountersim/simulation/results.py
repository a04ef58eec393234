"""
Results module for the simulator.

Defines what a simulated run produces: per-round snapshots and per-combatant
statistics of each encounter, the full run result with its score and seed,
the compressed lightweight summary kept by survey passes, and the records of
the two-pass sampler.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self

from encountersim.character.combatant import ActionRecord, CombatantSnapshot, EncounterStats
from encountersim.core.constants import InterestTier, TargetRole, Team
from encountersim.effects.event_system import Event


class Round(BaseModel):
    """Snapshot of both teams at the end of a round."""

    round: int = Field(description="Round number, 0 for the encounter start.")
    team1: list[CombatantSnapshot] = Field(default_factory=list, description="Players.")
    team2: list[CombatantSnapshot] = Field(default_factory=list, description="Monsters.")

    def alive(self, team: Team) -> list[CombatantSnapshot]:
        roster = self.team1 if team == Team.PLAYERS else self.team2
        return [combatant for combatant in roster if combatant.is_alive]

    def team_hp(self, team: Team) -> float:
        roster = self.team1 if team == Team.PLAYERS else self.team2
        return sum(combatant.state.current_hp for combatant in roster)


class EncounterResult(BaseModel):
    """Outcome of one combat encounter."""

    encounter_index: int = Field(description="Index of the encounter among the combats.")
    winner: Team | None = Field(default=None, description="Winning team, None on a draw.")
    reason: str = Field(description="Why the encounter ended.")
    rounds_fought: int = Field(description="Number of rounds fought.")
    target_role: TargetRole = Field(
        default=TargetRole.STANDARD,
        description="Intended weight of the encounter in the adventuring day.",
    )
    initial: list[CombatantSnapshot] = Field(
        default_factory=list,
        description="Every combatant at the start of the encounter.",
    )
    rounds: list[Round] = Field(
        default_factory=list,
        description="Round snapshots; only the final one when detail is off.",
    )
    stats: dict[str, EncounterStats] = Field(
        default_factory=dict,
        description="Statistics per combatant id.",
    )
    actions: dict[str, list[ActionRecord]] = Field(
        default_factory=dict,
        description="Actions taken per combatant id.",
    )
    score: float = Field(default=0, description="Score of the encounter.")

    @property
    def final_round(self) -> Round:
        return self.rounds[-1]


class SimulationResult(BaseModel):
    """One full run through a timeline."""

    model_config = ConfigDict(frozen=True)

    encounters: list[EncounterResult] = Field(
        default_factory=list,
        description="Results of the combat encounters, in order.",
    )
    score: float = Field(description="Score of the run.")
    seed: int = Field(description="Seed that produced the run.")
    short_rests: int = Field(default=0, description="Short rests taken.")

    @property
    def final_round(self) -> Round | None:
        if not self.encounters or not self.encounters[-1].rounds:
            return None
        return self.encounters[-1].final_round

    def survivors(self) -> int:
        """Returns the number of players standing at the end of the run."""
        final = self.final_round
        return len(final.alive(Team.PLAYERS)) if final is not None else 0

    def is_win(self) -> bool:
        """The players won if someone stands and every monster is down."""
        final = self.final_round
        if final is None:
            return False
        return bool(final.alive(Team.PLAYERS)) and not final.alive(Team.MONSTERS)

    def duration(self) -> int:
        """Returns the total number of rounds fought."""
        return sum(encounter.rounds_fought for encounter in self.encounters)


class LightweightRun(BaseModel):
    """Compressed summary of a run, without events or round snapshots."""

    model_config = ConfigDict(frozen=True)

    seed: int = Field(description="Seed that produced the run.")
    encounter_scores: list[float] = Field(
        default_factory=list,
        description="Score of each combat encounter.",
    )
    final_score: float = Field(description="Score of the run.")
    total_survivors: int = Field(description="Players standing at the end.")
    has_death: bool = Field(description="Whether a player ended any encounter at 0 HP.")
    first_death_encounter: int | None = Field(
        default=None,
        description="Index of the first encounter a player ended at 0 HP.",
    )
    total_hp_lost: float = Field(
        default=0,
        description="Hit points the party lost over the day.",
    )

    @classmethod
    def from_result(cls, result: SimulationResult) -> Self:
        """
        Compresses a full run.

        Args:
            result (SimulationResult): The run.

        Returns:
            LightweightRun: Its summary.

        """
        first_death = None
        hp_lost = 0.0
        for encounter in result.encounters:
            final = encounter.final_round
            if first_death is None and len(final.alive(Team.PLAYERS)) < len(final.team1):
                first_death = encounter.encounter_index
            start = {c.id: c.state.current_hp for c in encounter.initial if c.team == Team.PLAYERS}
            for combatant in final.team1:
                hp_lost += max(0.0, start.get(combatant.id, 0.0) - combatant.state.current_hp)
        return cls(
            seed=result.seed,
            encounter_scores=[encounter.score for encounter in result.encounters],
            final_score=result.score,
            total_survivors=result.survivors(),
            has_death=first_death is not None,
            first_death_encounter=first_death,
            total_hp_lost=hp_lost,
        )


class SimulationRun(BaseModel):
    """A run together with its event log."""

    result: SimulationResult = Field(description="The run.")
    events: list[Event] = Field(default_factory=list, description="Its event log.")


class SelectedSeed(BaseModel):
    """A seed picked for replay by the seed selector."""

    seed: int = Field(description="The seed.")
    tier: InterestTier = Field(description="Replay detail.")
    label: str = Field(description="Why it was picked, such as 'P50' or 'DEATH-E2'.")


class ScorePercentiles(BaseModel):
    """Distribution of scores across a survey."""

    min: float = Field(default=0, description="Lowest score.")
    p25: float = Field(default=0, description="25th percentile.")
    median: float = Field(default=0, description="Median score.")
    p75: float = Field(default=0, description="75th percentile.")
    max: float = Field(default=0, description="Highest score.")
    mean: float = Field(default=0, description="Mean score.")
    std_dev: float = Field(default=0, description="Standard deviation.")


class ReproducibilityMismatch(BaseModel):
    """A replay whose outcome differs from its survey run."""

    seed: int = Field(description="Seed of the run.")
    survey_score: float = Field(description="Score of the survey run.")
    replay_score: float = Field(description="Score of the replay.")
    survey_survivors: int = Field(description="Survivors in the survey run.")
    replay_survivors: int = Field(description="Survivors in the replay.")


class TwoPassSummary(BaseModel):
    """Everything produced by a survey followed by selective replays."""

    iterations: int = Field(description="Number of survey runs.")
    survey: list[LightweightRun] = Field(default_factory=list, description="Survey runs.")
    selected: list[SelectedSeed] = Field(default_factory=list, description="Selected seeds.")
    replays: list[SimulationRun] = Field(
        default_factory=list,
        description="Replays of the full and lean tiers.",
    )
    percentiles: ScorePercentiles = Field(
        default_factory=ScorePercentiles,
        description="Score distribution of the survey.",
    )
    mismatches: list[ReproducibilityMismatch] = Field(
        default_factory=list,
        description="Replays that diverged from the survey.",
    )
    lightweight_only: bool = Field(
        default=False,
        description="Whether replays were forced to run without event logs.",
    )

    @property
    def is_reproducible(self) -> bool:
        return not self.mismatches
