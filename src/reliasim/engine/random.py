"""Seeded 32-bit xorshift generator.

Every step is masked to 32 bits, so the same seed yields the same float
stream on every platform and interpreter.
"""

from __future__ import annotations

import math

_MASK_32 = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0
DEFAULT_STATE = 123456789


class XorShift32:
    """Deterministic pseudo-random source for a single simulation run.

    Args:
        seed: Integer seed. Only the low 32 bits are used; a seed whose
            low 32 bits are zero (xorshift's absorbing state) falls back
            to :data:`DEFAULT_STATE`.

    Example::

        rng = XorShift32(42)
        a = [rng.next_float() for _ in range(3)]
        rng = XorShift32(42)
        assert a == [rng.next_float() for _ in range(3)]
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int | None = None) -> None:
        state = (seed or 0) & _MASK_32
        self._state = state or DEFAULT_STATE

    @property
    def state(self) -> int:
        """Return the current 32-bit internal state."""
        return self._state

    def next_float(self) -> float:
        """Advance the state and return a float in ``[0, 1)``."""
        x = self._state
        x ^= (x << 13) & _MASK_32
        x ^= x >> 17
        x ^= (x << 5) & _MASK_32
        self._state = x
        return x / _TWO_POW_32

    def next_int(self, lo: int, hi: int) -> int:
        """Return an integer in ``[lo, hi]`` inclusive.

        Args:
            lo: Lower bound.
            hi: Upper bound, must be >= *lo*.

        Raises:
            ValueError: If *lo* > *hi*.
        """
        if lo > hi:
            msg = f"lo must be <= hi, got lo={lo}, hi={hi}"
            raise ValueError(msg)
        return math.floor(self.next_float() * (hi - lo + 1)) + lo
