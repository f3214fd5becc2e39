"""Logical timestamp generator shared by both logs."""

from __future__ import annotations

import threading
import time

from .types import Timestamp


class LogicalClock:
    """Monotonically advancing score source.

    Args:
        step: Amount added per call; large enough that scores never collide
        seed: Starting value, defaults to wall-clock nanoseconds

    Invariants:
        - next() hands out strictly increasing values
        - No two callers ever observe the same value, even across threads
    """

    def __init__(self, step: int = 10_000, seed: Timestamp | None = None):
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")  # noqa: TRY003
        self.step = step
        self.seed: Timestamp = time.time_ns() if seed is None else seed
        self._next: Timestamp = self.seed
        self._lock = threading.Lock()

    def next(self) -> Timestamp:
        """Return the current value and advance by one step."""
        with self._lock:
            ts = self._next
            self._next += self.step
            return ts

    def reset(self, seed: Timestamp | None = None) -> None:
        """Start over from a new seed (wall-clock nanoseconds by default)."""
        with self._lock:
            self.seed = time.time_ns() if seed is None else seed
            self._next = self.seed

    def peek(self) -> Timestamp:
        """Return the value the next call will hand out."""
        with self._lock:
            return self._next

    def offset(self, steps: int) -> Timestamp:
        """Score reached ``steps`` calls after the seed."""
        return self.seed + steps * self.step
