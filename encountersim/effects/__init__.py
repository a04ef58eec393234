"""
Effects system module for the encounter simulator.

This module contains buffs, triggers, the effect manager and the event records
that describe every state transition of a run.
"""
