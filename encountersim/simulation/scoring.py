"""
Scoring module for the simulator.

Turns the final state of an encounter into a single number: player hit
points count ten times as much as monster hit points. The efficiency mode
also charges the party for the weighted resources it burned.
"""

from collections.abc import Iterable

from encountersim.core.constants import ScoringMode, Team
from encountersim.simulation.results import Round, SimulationResult

PLAYER_HP_WEIGHT = 10.0
EFFICIENCY_BASE = 1_000_000.0


def standard_score(final: Round) -> float:
    """Returns ``10 * sum(player HP) - sum(monster HP)`` for a round snapshot."""
    return PLAYER_HP_WEIGHT * final.team_hp(Team.PLAYERS) - final.team_hp(Team.MONSTERS)


def resource_penalty(final: Round) -> float:
    """Returns the weighted resources the party has spent so far."""
    return sum(combatant.state.spent_weighted for combatant in final.team1)


def encounter_score(final: Round, mode: ScoringMode = ScoringMode.STANDARD) -> float:
    """
    Scores the final round of an encounter.

    Args:
        final (Round): The final round snapshot.
        mode (ScoringMode): The scoring formula.

    Returns:
        float: The score, higher is better for the players.

    """
    score = standard_score(final)
    if mode == ScoringMode.EFFICIENCY:
        return EFFICIENCY_BASE + score - resource_penalty(final)
    return score


def sort_results(results: Iterable[SimulationResult]) -> list[SimulationResult]:
    """Sorts runs by ascending score, ties broken by seed."""
    return sorted(results, key=lambda result: (result.score, result.seed))
