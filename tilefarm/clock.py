"""Time sources.

Growth and save timestamps read time only through a ``Clock`` so that tests
(and replays) can drive the world without real delays.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> int:
        """Current time as integer epoch milliseconds."""
        ...


class SystemClock:
    """Wall-clock time."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start_ms: int = 0):
        self._now = int(start_ms)

    def now_ms(self) -> int:
        return self._now

    def advance(self, *, ms: int = 0, seconds: float = 0) -> int:
        delta = int(ms + seconds * 1000)
        if delta < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += delta
        return self._now

    def set(self, now_ms: int) -> None:
        self._now = int(now_ms)
