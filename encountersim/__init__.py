"""
Encounter simulator package.

Runs tactical combat encounters between a party and groups of monsters many
times with seeded dice, and turns the distribution of outcomes into
percentile statistics and a classification of how hard the encounters are.
"""

from encountersim.analysis.statistics import (
    run_decile_analysis,
    run_decile_analysis_with_logs,
    run_encounter_analysis,
    run_quintile_analysis,
)
from encountersim.character.creature import Creature
from encountersim.core.config import DEFAULT_CONFIG, SimulationConfig
from encountersim.simulation.runner import (
    run_monte_carlo,
    run_single_event_driven_simulation,
    run_single_lightweight_simulation,
    run_survey_pass,
)
from encountersim.simulation.timeline import CombatStep, Encounter, ShortRestStep, TimelineStep
from encountersim.simulation.two_pass import run_two_pass_simulation

__all__ = [
    # Import from analysis/statistics.py
    "run_decile_analysis",
    "run_decile_analysis_with_logs",
    "run_encounter_analysis",
    "run_quintile_analysis",
    # Import from character/creature.py
    "Creature",
    # Import from core/config.py
    "DEFAULT_CONFIG",
    "SimulationConfig",
    # Import from simulation/runner.py
    "run_monte_carlo",
    "run_single_event_driven_simulation",
    "run_single_lightweight_simulation",
    "run_survey_pass",
    # Import from simulation/timeline.py
    "CombatStep",
    "Encounter",
    "ShortRestStep",
    "TimelineStep",
    # Import from simulation/two_pass.py
    "run_two_pass_simulation",
]
