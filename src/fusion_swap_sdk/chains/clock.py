"""Timestamp sources for the escrow programs."""

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current unix timestamp."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall-clock time in whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock moved explicitly by the caller (tests, simulations)."""

    def __init__(self, timestamp: int = 0):
        self._timestamp = timestamp

    def now(self) -> int:
        return self._timestamp

    def set(self, timestamp: int) -> None:
        self._timestamp = timestamp

    def advance(self, seconds: int) -> int:
        self._timestamp += seconds
        return self._timestamp
