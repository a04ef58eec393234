"""
Tests for the simulation context, the run cache and the configuration.
"""

import pytest

from conftest import make_fighter
from encountersim.core.config import SimulationConfig
from encountersim.core.context import RunCache, SimulationContext, scenario_hash
from encountersim.simulation.results import LightweightRun


def _run(seed: int) -> LightweightRun:
    return LightweightRun(
        seed=seed, final_score=float(seed), total_survivors=0, has_death=False
    )


def test_context_owns_a_seeded_roller():
    """Test that two contexts with the same seed roll the same dice."""
    first, second = SimulationContext(7), SimulationContext(7)
    assert first.seed == 7
    assert [first.rng.roll(20) for _ in range(10)] == [second.rng.roll(20) for _ in range(10)]


def test_context_draws_a_seed_when_missing():
    """Test that a context without a seed still reports the one it drew."""
    context = SimulationContext()
    assert isinstance(context.seed, int)


def test_scenario_hash_is_stable():
    """Test that equal scenarios hash the same and different ones do not."""
    party = [make_fighter()]
    assert scenario_hash(party, SimulationConfig()) == scenario_hash(party, SimulationConfig())
    assert scenario_hash(party, SimulationConfig()) != scenario_hash(
        party, SimulationConfig(max_rounds=10)
    )
    assert scenario_hash(party) != scenario_hash([make_fighter(hp=31)])


def test_cache_hit_and_miss():
    """Test that the cache counts hits and misses."""
    cache = RunCache(10)
    assert cache.get("scenario", 1) is None
    cache.put("scenario", 1, _run(1))
    assert cache.get("scenario", 1) == _run(1)
    assert cache.get("other", 1) is None
    assert cache.hits == 1
    assert cache.misses == 2


def test_cache_clears_when_full():
    """Test that a full cache is emptied before the next insert."""
    cache = RunCache(3)
    for seed in range(3):
        cache.put("scenario", seed, _run(seed))
    assert len(cache) == 3
    cache.put("scenario", 3, _run(3))
    assert len(cache) == 1
    assert cache.get("scenario", 0) is None
    assert cache.get("scenario", 3) is not None


def test_cache_replaces_existing_entry_when_full():
    """Test that storing a seed already cached overwrites it without evicting the rest."""
    cache = RunCache(2)
    cache.put("scenario", 0, _run(0))
    cache.put("scenario", 1, _run(1))
    cache.put("scenario", 1, _run(5))
    assert len(cache) == 2
    assert cache.get("scenario", 0) == _run(0)
    assert cache.get("scenario", 1).final_score == 5


@pytest.mark.parametrize(
    "field, value",
    [
        ("max_rounds", 0),
        ("max_turns", -1),
        ("cache_capacity", 0),
        ("max_full_replays", -1),
        ("reproducibility_tolerance", -1.0),
        ("max_workers", 0),
    ],
)
def test_config_rejects_invalid_values(field, value):
    """Test that the configuration refuses out-of-range limits."""
    with pytest.raises(ValueError):
        SimulationConfig(**{field: value})
