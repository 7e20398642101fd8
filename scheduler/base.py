"""
Job snapshot and the abstract scheduling queue (Strategy pattern).

The Dispatcher only knows about AbstractScheduler — it calls push(),
pop_max() and size() without caring how the ordering is implemented.

Job is an immutable value: every state change (RUNNING, outcome, retry)
produces a new snapshot via dataclasses.replace(). Nothing ever mutates a
job that is sitting inside the queue, so a queued snapshot can't be
aliased by code that still holds an older copy.

Lifecycle of one external job:

    PENDING ──pop──> RUNNING ──> SUCCESS                      (terminal)
                        │
                        └──> FAILED ──retry──> PENDING (attempt+1, priority+1)
                                 │
                                 └──exhausted──> FAILED       (terminal)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional

from models.enums import FailReason, JobStatus

MIN_PRIORITY = 1
MAX_PRIORITY = 10


@dataclass(frozen=True)
class Job:
    """
    One snapshot of a job.

    Timestamps are integer milliseconds from the dispatcher's clock.
    start/end timestamps and the derived timings belong to the *current*
    attempt and are cleared when a retry snapshot is created.
    """
    external_id: int           # 1..N, assigned at seeding, never reused
    priority: int              # 1..10, higher = dispatched sooner
    max_retries: int           # cap copied from configuration
    enqueue_timestamp: int     # most recent enqueue (reset on every retry)
    attempt: int = 0           # zero-based, increments only on failure-and-retry
    status: JobStatus = JobStatus.PENDING
    fail_reason: FailReason = FailReason.NONE
    start_timestamp: Optional[int] = None
    end_timestamp: Optional[int] = None
    wait_ms: int = 0
    service_ms: int = 0
    turnaround_ms: int = 0

    def __post_init__(self):
        if not MIN_PRIORITY <= self.priority <= MAX_PRIORITY:
            raise ValueError(f"priority must be in [{MIN_PRIORITY}, {MAX_PRIORITY}], got {self.priority}")
        if not 0 <= self.attempt <= self.max_retries:
            raise ValueError(f"attempt {self.attempt} outside [0, {self.max_retries}]")

    def evolve(self, **changes) -> "Job":
        """Return a new snapshot with the given fields changed."""
        return replace(self, **changes)


class AbstractScheduler(ABC):
    """
    Interface for the scheduling queue.

    - push: add a pending job snapshot
    - pop_max: remove and return the next job; raises QueueUnderflowError if empty
    - peek: look at the next job without removing it (None if empty)
    - size: how many jobs are queued
    """

    @abstractmethod
    def push(self, job: Job) -> None:
        ...

    @abstractmethod
    def pop_max(self) -> Job:
        ...

    @abstractmethod
    def peek(self) -> Optional[Job]:
        ...

    @abstractmethod
    def size(self) -> int:
        ...

    def __len__(self) -> int:
        return self.size()

    def __bool__(self) -> bool:
        return self.size() > 0
