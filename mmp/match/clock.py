"""Time sources for the pool and the driver.

The pool never reads a clock itself; callers pass ``now``. These classes let
the driver and the simulation share one notion of time.
"""

from __future__ import annotations
import time
from threading import Lock


class SystemClock:
    """Monotonic wall time in seconds since the clock was created."""

    def __init__(self):
        self._origin = time.monotonic()

    def now(self) -> float:
        return time.monotonic() - self._origin


class ManualClock:
    """Simulated clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._lock = Lock()

    def now(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError(f"Cannot move a clock backwards (got {seconds})")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, value: float) -> None:
        with self._lock:
            if value < self._now:
                raise ValueError(f"Cannot move a clock backwards ({value} < {self._now})")
            self._now = float(value)


__all__ = ["SystemClock", "ManualClock"]
