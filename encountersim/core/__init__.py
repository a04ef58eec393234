"""
Core system module for the encounter simulator.

This module contains the fundamental components shared by every layer: constants,
configuration, seeded dice, the formula parser, logging, errors and console helpers.
"""
