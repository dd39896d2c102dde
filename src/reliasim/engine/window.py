"""Fixed-capacity ring buffer for the circuit breaker's error-rate window."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class RollingWindow:
    """Holds the most recent ``capacity`` per-tick error rates.

    Slots are preallocated; once full, each push overwrites the oldest
    entry. Iteration yields entries oldest first.

    Attributes:
        capacity: Maximum number of retained entries.
    """

    __slots__ = ("_slots", "_start", "_size", "capacity")

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            msg = f"capacity must be >= 1, got {capacity}"
            raise ValueError(msg)
        self.capacity = capacity
        self._slots: list[float] = [0.0] * capacity
        self._start = 0
        self._size = 0

    def push(self, value: float) -> float | None:
        """Append *value*, evicting the oldest entry when full.

        Returns:
            The evicted value, or None if the window was not yet full.
        """
        evicted: float | None = None
        if self._size < self.capacity:
            self._slots[(self._start + self._size) % self.capacity] = value
            self._size += 1
        else:
            evicted = self._slots[self._start]
            self._slots[self._start] = value
            self._start = (self._start + 1) % self.capacity
        return evicted

    def mean(self) -> float:
        """Return the arithmetic mean of the retained entries (0.0 if empty)."""
        if self._size == 0:
            return 0.0
        return sum(self) / self._size

    def __iter__(self) -> Iterator[float]:
        for offset in range(self._size):
            yield self._slots[(self._start + offset) % self.capacity]

    def __len__(self) -> int:
        return self._size
