"""
Simulation context module for the simulator.

Provides the per-run context that owns the dice roller, together with the
shared run cache used by the survey pass. Nothing in the simulator keeps a
module-level RNG or cache: both are created here and passed down.
"""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

from catchery import log_debug
from pydantic import BaseModel

from encountersim.core.config import DEFAULT_CONFIG, SimulationConfig
from encountersim.core.rng import DiceRng

if TYPE_CHECKING:
    from encountersim.simulation.results import LightweightRun


def scenario_hash(*parts: BaseModel | Iterable[BaseModel]) -> str:
    """
    Computes a stable hash of a scenario.

    Args:
        *parts: Models, or iterables of models, describing the scenario.

    Returns:
        str: The hex digest of the JSON form of every model.

    """
    digest = hashlib.sha256()
    for part in parts:
        models = [part] if isinstance(part, BaseModel) else list(part)
        for model in models:
            digest.update(model.model_dump_json().encode("utf-8"))
            digest.update(b"\x00")
        digest.update(b"\x01")
    return digest.hexdigest()


class RunCache:
    """Thread-safe cache of lightweight runs keyed by scenario hash and seed."""

    def __init__(self, capacity: int = DEFAULT_CONFIG.cache_capacity) -> None:
        self.capacity = capacity
        self._entries: dict[tuple[str, int], LightweightRun] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, scenario: str, seed: int) -> LightweightRun | None:
        """
        Looks up a run.

        Args:
            scenario (str): The scenario hash.
            seed (int): The seed of the run.

        Returns:
            LightweightRun | None: The cached run, if any.

        """
        with self._lock:
            run = self._entries.get((scenario, seed))
            if run is None:
                self.misses += 1
            else:
                self.hits += 1
            return run

    def put(self, scenario: str, seed: int, run: LightweightRun) -> None:
        """
        Stores a run, clearing the whole cache first when it is full and the
        run is not already cached.

        Args:
            scenario (str): The scenario hash.
            seed (int): The seed of the run.
            run (LightweightRun): The run to store.

        """
        with self._lock:
            key = (scenario, seed)
            if len(self._entries) >= self.capacity and key not in self._entries:
                log_debug(
                    "Run cache full, evicting every entry",
                    {"capacity": self.capacity},
                )
                self._entries.clear()
            self._entries[key] = run

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SimulationContext:
    """Owns the random source and configuration of a single run."""

    def __init__(
        self,
        seed: int | None = None,
        config: SimulationConfig | None = None,
        cache: RunCache | None = None,
    ) -> None:
        self.rng = DiceRng(seed)
        self.config = config or DEFAULT_CONFIG
        self.cache = cache

    @property
    def seed(self) -> int:
        return self.rng.seed
