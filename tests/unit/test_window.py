"""Tests for the rolling error-rate window."""

from __future__ import annotations

import pytest

from reliasim.engine.window import RollingWindow


class TestRollingWindow:
    """Tests for RollingWindow."""

    def test_empty_mean_is_zero(self) -> None:
        window = RollingWindow(3)
        assert len(window) == 0
        assert window.mean() == 0.0

    def test_push_until_full(self) -> None:
        window = RollingWindow(3)
        assert window.push(1.0) is None
        assert window.push(2.0) is None
        assert window.push(3.0) is None
        assert list(window) == [1.0, 2.0, 3.0]
        assert window.mean() == 2.0

    def test_overwrites_oldest(self) -> None:
        window = RollingWindow(3)
        for value in (1.0, 2.0, 3.0):
            window.push(value)
        assert window.push(4.0) == 1.0
        assert window.push(5.0) == 2.0
        assert list(window) == [3.0, 4.0, 5.0]
        assert len(window) == 3
        assert window.mean() == 4.0

    def test_capacity_one(self) -> None:
        window = RollingWindow(1)
        window.push(10.0)
        assert window.push(20.0) == 10.0
        assert window.mean() == 20.0

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError, match="capacity must be >= 1"):
            RollingWindow(0)
