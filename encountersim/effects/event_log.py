"""
Event log module for the simulator.

Provides the append-only event log filled by the engine and pure helpers
over recorded events, such as slicing out a single encounter or summing the
damage dealt and taken.
"""

from collections.abc import Iterator, Sequence

from encountersim.effects.event_system import (
    AttackHit,
    DamageTaken,
    EncounterEnded,
    EncounterStarted,
    Event,
    SaveResolved,
    TriggerFired,
)


class EventLog:
    """Append-only ordered record of events."""

    def __init__(self, enabled: bool = True) -> None:
        """
        Initializes the log.

        Args:
            enabled (bool): When False nothing is kept, as in survey runs.

        """
        self.enabled = enabled
        self._events: list[Event] = []
        self.round = 0

    def record(self, event: Event) -> None:
        if self.enabled:
            self._events.append(event)

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    def to_list(self) -> list[Event]:
        return list(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)


def slice_events_for_encounter(events: Sequence[Event], encounter_index: int) -> list[Event]:
    """
    Returns the events of one encounter.

    Args:
        events (Sequence[Event]): The full event log of a run.
        encounter_index (int): Index of the encounter among the combats.

    Returns:
        list[Event]: Every event from the matching EncounterStarted up to and
            including its EncounterEnded, or an empty list if the encounter
            is not in the log.

    """
    sliced: list[Event] = []
    inside = False
    for event in events:
        if isinstance(event, EncounterStarted):
            inside = event.encounter_index == encounter_index
        if inside:
            sliced.append(event)
            if isinstance(event, EncounterEnded):
                break
    return sliced


def damage_dealt(events: Sequence[Event]) -> float:
    """Sums the damage reported by attacks, saves and triggers."""
    total = 0.0
    for event in events:
        if isinstance(event, (AttackHit, SaveResolved, TriggerFired)):
            total += event.damage
    return total


def damage_taken(events: Sequence[Event]) -> float:
    """Sums the damage reported by the combatants receiving it."""
    return sum(event.damage for event in events if isinstance(event, DamageTaken))
