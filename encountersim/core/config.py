"""
Configuration module for the simulator.

Defines the run-time limits and switches that shape a simulation, such as
the round and turn caps that end stalled encounters, the survey cache size
and the replay budgets of the two-pass sampler.
"""

from typing import Any

from pydantic import BaseModel, Field

from encountersim.core.constants import ScoringMode


class SimulationConfig(BaseModel):
    """Limits and switches applied to every simulated run."""

    max_rounds: int = Field(
        default=50,
        description="Rounds after which an encounter ends in a draw.",
    )
    max_turns: int = Field(
        default=200,
        description="Total turns after which an encounter ends in a draw.",
    )
    cache_capacity: int = Field(
        default=50_000,
        description="Maximum number of lightweight runs kept in the run cache.",
    )
    full_detail_iteration_limit: int = Field(
        default=1_000,
        description="Iteration count above which the two-pass sampler is used.",
    )
    max_full_replays: int = Field(
        default=200,
        description="Maximum number of replays that keep a full event log.",
    )
    reproducibility_tolerance: float = Field(
        default=1e-10,
        description="Allowed score difference between a survey run and its replay.",
    )
    scoring_mode: ScoringMode = Field(
        default=ScoringMode.STANDARD,
        description="Scalar used to rank runs.",
    )
    concentration_checks: bool = Field(
        default=True,
        description="Whether damage forces a saving throw to keep concentration.",
    )
    max_workers: int = Field(
        default=1,
        description="Worker threads used by the survey pass.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if self.max_rounds <= 0:
            raise ValueError("max_rounds must be positive")
        if self.max_turns <= 0:
            raise ValueError("max_turns must be positive")
        if self.cache_capacity <= 0:
            raise ValueError("cache_capacity must be positive")
        if self.max_full_replays < 0:
            raise ValueError("max_full_replays must be non-negative")
        if self.reproducibility_tolerance < 0:
            raise ValueError("reproducibility_tolerance must be non-negative")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")


DEFAULT_CONFIG = SimulationConfig()
