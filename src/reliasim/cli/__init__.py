"""Command-line interface for ReliaSim."""
