"""
Events emitted by the dispatcher to its observers.

- JobAttemptCompleted: once per executed attempt (success or failure)
- RunSummary: exactly once, when the queue has drained

These are pydantic models rather than ORM rows so the core never depends on
the database. The recorder maps them onto models.job_attempt / models.run,
and the API reuses their field names for its response schemas.
"""

from pydantic import BaseModel, ConfigDict

from models.enums import FailReason, JobStatus


class JobAttemptCompleted(BaseModel):
    model_config = ConfigDict(frozen=True)

    run_id: str
    external_id: int
    priority: int
    attempt: int
    status: JobStatus
    fail_reason: FailReason = FailReason.NONE
    enqueue_timestamp: int
    start_timestamp: int
    end_timestamp: int
    wait_ms: int
    service_ms: int
    turnaround_ms: int

    @classmethod
    def from_job(cls, run_id: str, job) -> "JobAttemptCompleted":
        """Build the event from a finished attempt snapshot (scheduler.base.Job)."""
        return cls(
            run_id=run_id,
            external_id=job.external_id,
            priority=job.priority,
            attempt=job.attempt,
            status=job.status,
            fail_reason=job.fail_reason,
            enqueue_timestamp=job.enqueue_timestamp,
            start_timestamp=job.start_timestamp,
            end_timestamp=job.end_timestamp,
            wait_ms=job.wait_ms,
            service_ms=job.service_ms,
            turnaround_ms=job.turnaround_ms,
        )


class RunSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    run_id: str
    started_at: int
    finished_at: int
    total_jobs: int
    successes: int
    terminal_failures: int
    avg_wait_ms: float
    avg_service_ms: float
    avg_turnaround_ms: float
    throughput_jobs_per_second: float
