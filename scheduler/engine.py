"""
Dispatcher — the core orchestrator.

Runs strictly sequentially on the calling thread until every job has
reached a terminal state:

    seed N jobs ──> PriorityScheduler
                         │
              ┌──────────┘
              ▼
         pop_max() ──> AttemptExecutor.execute()      (backoff + service time)
                              │
              ┌───────────────┼────────────────────────┐
              ▼               ▼                        ▼
           SUCCESS     FAILED, retries left     FAILED, exhausted
           completed   RetryPolicy.next_attempt  completed
                       push() back on the queue  terminal_failures += 1

Every executed attempt (including the failed ones that get retried) is
published to the observers as a JobAttemptCompleted event. When the queue
drains, a single RunSummary is published.

Termination: each job is pushed at most max_retries + 1 times, because
next_attempt() is only called while attempt < max_retries.

Dependencies are injected (process model, clock, observers) rather than
read from globals, so a test can run a whole dispatch with a seeded model
on a SimulatedClock in microseconds.
"""

import logging
import uuid
from typing import Iterable, Optional

from jobs.process_model import RandomProcessModel
from models.enums import JobStatus
from models.errors import ConfigurationError
from models.events import JobAttemptCompleted, RunSummary
from scheduler.base import AbstractScheduler, Job
from scheduler.priority import PriorityScheduler
from worker.clock import Clock, MonotonicClock
from worker.executor import AttemptExecutor
from worker.observers import RunObserver
from worker.retry import RetryPolicy
from worker.stats import StatisticsAggregator

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    One Dispatcher = one run. Call run() once; it returns the RunSummary.

    Preconditions (checked here, raise ConfigurationError):
    - jobs >= 0
    - max_retries >= 0
    The process model checks stddev > 0 itself.
    """

    def __init__(
        self,
        process_model: RandomProcessModel,
        jobs: int,
        max_retries: int,
        clock: Optional[Clock] = None,
        observers: Iterable[RunObserver] = (),
        retry_policy: Optional[RetryPolicy] = None,
        queue: Optional[AbstractScheduler] = None,
        run_id: Optional[str] = None,
    ):
        if jobs < 0:
            raise ConfigurationError(f"jobs must be >= 0, got {jobs}")
        if max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {max_retries}")

        self.jobs = jobs
        self.max_retries = max_retries
        self.run_id = run_id or uuid.uuid4().hex

        self._model = process_model
        self._clock = clock or MonotonicClock()
        self._observers = list(observers)
        self._retry_policy = retry_policy or RetryPolicy()
        self._queue = queue if queue is not None else PriorityScheduler()
        self._executor = AttemptExecutor(self._model, self._clock, self._retry_policy)
        self._stats = StatisticsAggregator()

        self.completed: list[Job] = []
        self.attempts_executed = 0
        self._summary: Optional[RunSummary] = None

    @property
    def queue(self) -> AbstractScheduler:
        return self._queue

    @property
    def summary(self) -> Optional[RunSummary]:
        return self._summary

    def add_observer(self, observer: RunObserver) -> None:
        self._observers.append(observer)

    def run(self) -> RunSummary:
        if self._summary is not None:
            raise RuntimeError(f"Run {self.run_id} has already been executed")

        started_at = self._clock.now_ms()
        for observer in self._observers:
            observer.run_started(self.run_id, started_at)

        self._seed_jobs(started_at)
        logger.info(f"Run {self.run_id}: seeded {self.jobs} jobs (max_retries={self.max_retries})")

        while self._queue.size() > 0:
            self._dispatch_one()

        finished_at = self._clock.now_ms()
        self._summary = self._stats.summarize(self.run_id, started_at, finished_at)
        for observer in self._observers:
            observer.run_finished(self._summary)

        logger.info(
            f"Run {self.run_id} finished: {self._summary.successes} succeeded, "
            f"{self._summary.terminal_failures} failed, {self.attempts_executed} attempts"
        )
        return self._summary

    def _seed_jobs(self, t0: int) -> None:
        """
        Create jobs 1..N with random priorities.

        Seed timestamps are staggered 1ms apart and end at t0:

            external_id:        1          2      ...    N
            enqueue_timestamp:  t0-(N-1)   t0-(N-2)  ...  t0

        so they record seed order, and since none lies after t0 no attempt
        can start before its job was enqueued (wait_ms >= 0).
        """
        for external_id in range(1, self.jobs + 1):
            self._queue.push(Job(
                external_id=external_id,
                priority=self._model.priority(),
                max_retries=self.max_retries,
                enqueue_timestamp=t0 - (self.jobs - external_id),
            ))

    def _dispatch_one(self) -> None:
        job = self._queue.pop_max()
        finished = self._executor.execute(job)
        self.attempts_executed += 1

        # Every attempt is published, whether or not it is retried
        self._publish(finished)

        if finished.status == JobStatus.SUCCESS:
            self._finalize(finished)
        elif self._retry_policy.can_retry(finished):
            self._queue.push(self._retry_policy.next_attempt(finished, self._clock.now_ms()))
        else:
            logger.warning(
                f"Job {finished.external_id} exhausted retries "
                f"({finished.max_retries}), giving up"
            )
            self._finalize(finished)

    def _finalize(self, job: Job) -> None:
        self._stats.record_terminal(job)
        self.completed.append(job)

    def _publish(self, job: Job) -> None:
        event = JobAttemptCompleted.from_job(self.run_id, job)
        for observer in self._observers:
            observer.attempt_completed(event)
