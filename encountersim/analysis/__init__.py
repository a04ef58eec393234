"""
Analysis module for the encounter simulator.

This module turns sets of runs into decile and quintile statistics, risk vitals
and the archetype, intensity and tier of an encounter.
"""
