"""Logical clocks used to evaluate the withdrawal unlock time."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Return the current timestamp in whole seconds."""
        ...


class SystemClock:
    """Wall clock in UTC epoch seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Deterministic clock for simulations and tests."""

    def __init__(self, start: int = 0) -> None:
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int) -> None:
        self._now = int(timestamp)
