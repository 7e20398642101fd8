"""
Retry policy — decides what happens after an attempt fails.

Two outcomes:
1. attempt < max_retries  → build a retry snapshot and push it back on the queue
2. attempt == max_retries → the failure is terminal, the job is finalized

A retry snapshot differs from the failed attempt in exactly these fields:
- attempt           +1
- priority          +1, capped at 10 ("aging": a job that keeps failing
                    climbs above fresh work so it can't starve)
- enqueue_timestamp now (the retry competes as a newly enqueued job)
- status            back to PENDING; timing fields and fail_reason cleared

Backoff is applied when the retry is POPPED, not when it is pushed:

    attempt:    1     2     3     4
    backoff:  100   200   400   800  ms   (backoff_base_ms * 2^(attempt-1))
"""

import logging

from models.enums import FailReason, JobStatus
from scheduler.base import MAX_PRIORITY, Job

logger = logging.getLogger(__name__)


class RetryPolicy:

    def __init__(self, backoff_base_ms: int = 100):
        self.backoff_base_ms = backoff_base_ms

    def backoff_ms(self, attempt: int) -> int:
        """Delay before running `attempt`. First attempts run immediately."""
        if attempt <= 0:
            return 0
        return self.backoff_base_ms * (2 ** (attempt - 1))

    def can_retry(self, job: Job) -> bool:
        return job.attempt < job.max_retries

    def next_attempt(self, job: Job, now_ms: int) -> Job:
        """
        Build the PENDING snapshot for the next attempt of a failed job.

        Callers must check can_retry() first; asking for an attempt past the
        cap is a bug and Job.__post_init__ rejects it.
        """
        retry = job.evolve(
            attempt=job.attempt + 1,
            priority=min(MAX_PRIORITY, job.priority + 1),
            enqueue_timestamp=now_ms,
            status=JobStatus.PENDING,
            fail_reason=FailReason.NONE,
            start_timestamp=None,
            end_timestamp=None,
            wait_ms=0,
            service_ms=0,
            turnaround_ms=0,
        )
        logger.debug(
            f"Job {job.external_id} will be retried "
            f"({retry.attempt}/{job.max_retries}, priority {job.priority} → {retry.priority})"
        )
        return retry
