"""
Random process model — the simulated workload.

Every random draw in a run comes from here:
- service_duration(): how long an attempt occupies the dispatcher
- priority():         initial priority of a seeded job
- should_fail(n):     whether attempt n fails

The model owns a private random.Random instead of using the module-level
`random` functions. One instance is created per run and passed into the
dispatcher explicitly, so two models never share generator state and a
seeded model replays the exact same sequence of draws:

    RandomProcessModel(mean_ms=300, stddev_ms=100, seed=42)

Failure probability drops with each attempt to model a system that
"gets fixed" between retries, floored at 2%:

    attempt 0 → 20%,  attempt 1 → 14%,  attempt 2 → 8%,  attempt 3+ → 2%
"""

import random
from typing import Optional

from models.errors import ConfigurationError
from scheduler.base import MAX_PRIORITY, MIN_PRIORITY

MIN_SERVICE_MS = 30
BASE_FAILURE_PROBABILITY = 0.20
FAILURE_DECAY_PER_ATTEMPT = 0.06
MIN_FAILURE_PROBABILITY = 0.02


def failure_probability(attempt: int) -> float:
    return max(MIN_FAILURE_PROBABILITY, BASE_FAILURE_PROBABILITY - FAILURE_DECAY_PER_ATTEMPT * attempt)


class RandomProcessModel:

    def __init__(self, mean_ms: float, stddev_ms: float, seed: Optional[int] = None):
        if stddev_ms <= 0:
            raise ConfigurationError(f"stddev_ms must be > 0, got {stddev_ms}")
        self.mean_ms = mean_ms
        self.stddev_ms = stddev_ms
        self.seed = seed
        self._rng = random.Random(seed)

    def service_duration(self) -> int:
        """Normal(mean, stddev) in ms, floored at 30ms and rounded to an int."""
        return int(round(max(float(MIN_SERVICE_MS), self._rng.gauss(self.mean_ms, self.stddev_ms))))

    def priority(self) -> int:
        return self._rng.randint(MIN_PRIORITY, MAX_PRIORITY)

    def should_fail(self, attempt: int) -> bool:
        # Each call is an independent Bernoulli draw
        return self._rng.random() < failure_probability(attempt)
