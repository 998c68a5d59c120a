"""
Time sources for the locking contract.

The contract never advances time itself; it reads the current timestamp on
demand from a ``time_provider`` callable returning an integer.
"""

from __future__ import annotations

import time
from typing import Callable

TimeProvider = Callable[[], int]


def system_time() -> int:
    """Wall-clock seconds since the epoch."""
    return int(time.time())


def read_time(time_provider: TimeProvider) -> int:
    timestamp = time_provider()
    if isinstance(timestamp, bool):
        raise ValueError("time_provider must return an integer timestamp")
    try:
        return int(timestamp)
    except (TypeError, ValueError) as exc:
        raise ValueError("time_provider must return an integer timestamp") from exc


class ManualClock:
    """Deterministic clock for tests and simulations."""

    def __init__(self, start_time: int):
        self.current_time = int(start_time)

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Clock cannot move backwards.")
        self.current_time += int(seconds)
        return self.current_time

    def set(self, timestamp: int) -> int:
        if timestamp < self.current_time:
            raise ValueError(
                f"Clock cannot move backwards ({timestamp} < {self.current_time})."
            )
        self.current_time = int(timestamp)
        return self.current_time

    def __call__(self) -> int:
        return self.now()
