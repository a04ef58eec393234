"""
Character system module for the encounter simulator.

This module handles creature templates, their resource ledgers and the mutable
combatants built from them for each run.
"""
