"""
Tests for the printed reports.
"""

from rich.table import Table
from rich.text import Text

from encountersim.analysis.statistics import run_decile_analysis
from encountersim.core.sheets import (
    build_decile_table,
    format_event,
    print_aggregate_report,
    print_event_log,
)
from encountersim.core.utils import ccapture
from encountersim.effects.event_system import EncounterStarted, RoundEnded, RoundStarted, UnitDied
from encountersim.simulation.runner import run_monte_carlo


def test_format_event():
    """Test that events are turned into readable lines."""
    assert format_event(RoundStarted(round=3)) == "[bold]Round 3[/]"
    assert "goblin-1 drops to 0 HP" in format_event(UnitDied(unit_id="goblin-1"))


def test_build_decile_table(skirmish):
    """Test that the table has one row per decile and one for the median."""
    players, timeline = skirmish
    results = [run.result for run in run_monte_carlo(players, timeline, 20)]
    output = run_decile_analysis(results, "Skirmish", party_size=2)
    table = build_decile_table(output)
    assert isinstance(table, Table)
    assert table.row_count == 11
    print_aggregate_report(output)


def test_print_empty_report():
    """Test that an empty report prints without a table."""
    print_aggregate_report(run_decile_analysis([], "Nothing", party_size=1))


def test_format_unknown_event_falls_back_to_str():
    """Test that events without a dedicated format still print."""
    assert format_event(RoundEnded(round=2)) == "RoundEnded()"


def test_print_event_log(skirmish):
    """Test that a whole replay prints."""
    players, timeline = skirmish
    run = run_monte_carlo(players, timeline, 1)[0]
    print_event_log(run.events)
    started = next(e for e in run.events if isinstance(e, EncounterStarted))
    assert "Encounter 1 begins" in Text.from_ansi(ccapture(format_event(started))).plain
