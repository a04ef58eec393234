"""
Combat system module for the encounter simulator.

This module handles turn order, targeting, action resolution, damage and the
NPC decision logic of every combatant.
"""
