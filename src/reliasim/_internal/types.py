"""Shared type aliases for ReliaSim."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

# Field-named wire record (camelCase keys), as persisted or transmitted.
Record = dict[str, Any]

# Receives the message of an event emitted during a tick.
EventSink = Callable[[str], None]
