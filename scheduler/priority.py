"""
Priority-based scheduling queue.

Jobs with the HIGHEST priority number run first (10 = most urgent, 1 = least).
Among equal priorities, the job with the earliest enqueue_timestamp runs first.

Data structure: heapq is a min-heap, so the sort key is negated:
    (-priority, enqueue_timestamp, sequence, job)
- push:    heappush → O(log n)
- pop_max: heappop  → O(log n)

sequence is a monotonic insertion counter. It breaks ties between jobs with
the same priority AND the same enqueue_timestamp (every seeded job shares the
run's start time), so seeding order = dispatch order within a band. It also
stops Python from ever comparing two Job objects.

Retries are pushed with their NEW enqueue_timestamp, so an aged-up job
competes fairly with jobs that were enqueued while it was running.
"""

import heapq
from typing import Optional

from models.errors import QueueUnderflowError
from scheduler.base import AbstractScheduler, Job


class PriorityScheduler(AbstractScheduler):

    def __init__(self):
        self._heap: list[tuple[int, int, int, Job]] = []
        self._counter: int = 0

    def push(self, job: Job) -> None:
        heapq.heappush(self._heap, (-job.priority, job.enqueue_timestamp, self._counter, job))
        self._counter += 1

    def pop_max(self) -> Job:
        if not self._heap:
            raise QueueUnderflowError()
        return heapq.heappop(self._heap)[3]

    def peek(self) -> Optional[Job]:
        return self._heap[0][3] if self._heap else None

    def size(self) -> int:
        return len(self._heap)
