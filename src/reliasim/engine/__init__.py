"""Discrete-tick reliability simulation engine."""
