"""
Battle state module for the simulator.

Provides the per-encounter state shared by the engine: both rosters, the
id index used to resolve buff sources, the dice roller and the event log,
together with saving throws and event emission.
"""

from __future__ import annotations

from typing import Any

from encountersim.character.combatant import Combatant
from encountersim.core.config import SimulationConfig
from encountersim.core.constants import Ability, CreatureCondition, Team
from encountersim.core.error_handling import CorruptedStateError
from encountersim.core.rng import DiceRng
from encountersim.effects.effect_manager import EffectManager
from encountersim.effects.event_log import EventLog


class BattleState:
    """Everything the engine needs while one encounter is being fought."""

    def __init__(
        self,
        players: list[Combatant],
        monsters: list[Combatant],
        rng: DiceRng,
        log: EventLog,
        config: SimulationConfig,
        encounter_index: int = 0,
    ) -> None:
        self.players = players
        self.monsters = monsters
        self.rng = rng
        self.log = log
        self.config = config
        self.encounter_index = encounter_index
        self.round = 0
        self.turns = 0
        self._by_id: dict[str, Combatant] = {}
        for combatant in players + monsters:
            if combatant.id in self._by_id:
                raise CorruptedStateError(
                    f"Duplicate combatant id {combatant.id}",
                    {"encounter": encounter_index},
                )
            self._by_id[combatant.id] = combatant
        self.effects = EffectManager(self)

    # ==========================================================================
    # ROSTER
    # ==========================================================================

    @property
    def combatants(self) -> list[Combatant]:
        return self.players + self.monsters

    def get(self, combatant_id: str) -> Combatant:
        """
        Resolves a combatant id against the roster.

        Raises:
            CorruptedStateError: If the id is not part of the encounter.

        """
        combatant = self._by_id.get(combatant_id)
        if combatant is None:
            raise CorruptedStateError(
                f"Unknown combatant id {combatant_id}",
                {"encounter": self.encounter_index},
            )
        return combatant

    def find(self, combatant_id: str | None) -> Combatant | None:
        if combatant_id is None:
            return None
        return self._by_id.get(combatant_id)

    def team(self, team: Team) -> list[Combatant]:
        return self.players if team == Team.PLAYERS else self.monsters

    def allies_of(self, combatant: Combatant) -> list[Combatant]:
        return self.team(combatant.team)

    def enemies_of(self, combatant: Combatant) -> list[Combatant]:
        return self.team(combatant.team.opponent)

    def alive(self, team: Team) -> list[Combatant]:
        return [combatant for combatant in self.team(team) if combatant.is_alive]

    # ==========================================================================
    # EVENTS
    # ==========================================================================

    def emit(self, event_type: type, **fields: Any) -> None:
        """
        Records an event stamped with the current round.

        The event is only built when the log keeps events, so survey runs
        pay nothing for it.

        Args:
            event_type (type): The event class.
            **fields: Fields of the event.

        """
        if self.log.enabled:
            self.log.record(event_type(round=self.round, **fields))

    # ==========================================================================
    # SAVING THROWS
    # ==========================================================================

    def roll_save(self, target: Combatant, ability: Ability, dc: float) -> tuple[float, bool]:
        """
        Rolls a saving throw.

        Args:
            target (Combatant): The combatant saving.
            ability (Ability): The ability used.
            dc (float): The difficulty class.

        Returns:
            tuple[float, bool]: The total rolled and whether it meets the DC.

        """
        conditions = target.conditions()
        roll, _ = self.rng.roll_d20_with(
            CreatureCondition.SAVES_WITH_ADVANTAGE in conditions,
            CreatureCondition.SAVES_WITH_DISADVANTAGE in conditions,
        )
        total = roll + target.save_bonus(ability, self.rng)
        return total, total >= dc
