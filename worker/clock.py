"""
Time sources for the dispatcher.

The dispatcher never calls time.* directly; it asks a Clock. That gives
two interchangeable implementations:

- MonotonicClock: real time. sleep_ms() blocks the thread, so a run takes
  as long as the sum of its backoff and service delays.
- SimulatedClock: virtual time. sleep_ms() just advances a counter, so a
  run finishes instantly and, with a seeded process model, every timestamp
  is reproducible bit-for-bit. Tests use this one.

Both report integer milliseconds.
"""

import time
from abc import ABC, abstractmethod


class Clock(ABC):

    @abstractmethod
    def now_ms(self) -> int:
        ...

    @abstractmethod
    def sleep_ms(self, ms: int) -> None:
        ...


class MonotonicClock(Clock):

    def now_ms(self) -> int:
        return time.monotonic_ns() // 1_000_000

    def sleep_ms(self, ms: int) -> None:
        if ms > 0:
            time.sleep(ms / 1000)


class SimulatedClock(Clock):

    def __init__(self, start_ms: int = 0):
        self._now = start_ms
        self.slept_ms = 0   # total virtual time spent in sleep_ms()

    def now_ms(self) -> int:
        return self._now

    def sleep_ms(self, ms: int) -> None:
        if ms < 0:
            raise ValueError(f"cannot sleep a negative duration ({ms}ms)")
        self._now += ms
        self.slept_ms += ms
