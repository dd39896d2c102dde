"""Live, wall-clock paced streaming of simulation runs."""

from __future__ import annotations

from reliasim.live.driver import LiveRun, LiveUpdate, UpdateKind

__all__ = ["LiveRun", "LiveUpdate", "UpdateKind"]
