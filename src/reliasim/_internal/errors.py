"""Custom exception hierarchy for ReliaSim."""

from __future__ import annotations


class ReliaSimError(Exception):
    """Base exception for all ReliaSim errors.

    All custom exceptions in ReliaSim inherit from this class, making it
    easy to catch any ReliaSim-specific error with a single except clause.
    """


class ConfigError(ReliaSimError):
    """Raised when configuration is invalid or missing.

    The message always names the offending field.

    Examples:
        - ``capacity`` is zero or negative.
        - ``baseFailureProbability`` is outside ``[0, 1]``.
        - An unknown preset name or backoff kind was requested.
        - An environment variable has an invalid value.
    """


class SimulationStateError(ReliaSimError):
    """Raised when an engine operation is called in the wrong phase.

    Examples:
        - ``advance_tick()`` after every configured tick has run.
        - ``summarize()`` before the run has completed.
    """


class StorageError(ReliaSimError):
    """Raised when a scenario or run cannot be persisted or loaded."""


class NotFoundError(StorageError):
    """Raised when a scenario or run id does not exist in a repository."""
