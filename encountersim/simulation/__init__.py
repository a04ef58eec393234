"""
Simulation module for the encounter simulator.

This module runs timelines of encounters and rests, scores the runs and drives the
Monte Carlo and two-pass sampling.
"""
