"""
Attempt executor — runs a single attempt of a job.

The dispatcher pops a job, then hands it here. execute() handles the whole
attempt:

    1. Backoff: if this is a retry, wait backoff_ms(attempt) first
    2. Mark RUNNING, stamp start, wait_ms = start - enqueue
    3. Draw a service duration and wait that long (the "work")
    4. Draw the outcome from the process model
    5. Stamp end, turnaround_ms = end - enqueue
    6. Return a SUCCESS or FAILED(SIMULATED_FAILURE) snapshot

Because the backoff happens before the start stamp, wait_ms includes it.
turnaround_ms is always exactly end - enqueue of the CURRENT attempt.

The executor never raises for a failed attempt: failure is just the
status of the returned snapshot. What to do about it is the dispatcher's
decision (retry or finalize).
"""

import logging

from jobs.process_model import RandomProcessModel
from models.enums import FailReason, JobStatus
from scheduler.base import Job
from worker.clock import Clock
from worker.retry import RetryPolicy

logger = logging.getLogger(__name__)


class AttemptExecutor:

    def __init__(self, process_model: RandomProcessModel, clock: Clock, retry_policy: RetryPolicy):
        self._model = process_model
        self._clock = clock
        self._retry_policy = retry_policy

    def execute(self, job: Job) -> Job:
        # ── Step 1: Backoff (retries only) ──────────────────────
        backoff = self._retry_policy.backoff_ms(job.attempt)
        if backoff:
            logger.debug(f"Job {job.external_id} backing off {backoff}ms before attempt {job.attempt}")
            self._clock.sleep_ms(backoff)

        # ── Step 2: Mark RUNNING ────────────────────────────────
        start = self._clock.now_ms()
        running = job.evolve(
            status=JobStatus.RUNNING,
            start_timestamp=start,
            wait_ms=start - job.enqueue_timestamp,
        )

        # ── Step 3: Do the "work" ───────────────────────────────
        service_ms = self._model.service_duration()
        self._clock.sleep_ms(service_ms)

        # ── Step 4–5: Outcome and end stamp ─────────────────────
        failed = self._model.should_fail(job.attempt)
        end = self._clock.now_ms()
        finished = running.evolve(
            service_ms=service_ms,
            end_timestamp=end,
            turnaround_ms=end - job.enqueue_timestamp,
        )

        # ── Step 6: Outcome snapshot ────────────────────────────
        if failed:
            return finished.evolve(status=JobStatus.FAILED, fail_reason=FailReason.SIMULATED_FAILURE)
        return finished.evolve(status=JobStatus.SUCCESS)
