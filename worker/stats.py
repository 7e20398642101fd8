"""
Run statistics.

Only TERMINAL attempts feed the sums: the attempt that succeeded, or the
attempt that exhausted the retries. Intermediate failed attempts are
recorded by observers but don't count here, so each external job
contributes exactly once.

    avg_*      = sum_* / total_jobs           (0.0 when total_jobs == 0)
    throughput = successes / wall_clock_sec   (wall clock floored at 1ms)
"""

from dataclasses import dataclass

from models.enums import JobStatus
from models.events import RunSummary
from scheduler.base import Job

MIN_WALL_CLOCK_SEC = 0.001


@dataclass
class StatisticsAggregator:
    successes: int = 0
    terminal_failures: int = 0
    sum_wait_ms: int = 0
    sum_service_ms: int = 0
    sum_turnaround_ms: int = 0

    @property
    def total_jobs(self) -> int:
        return self.successes + self.terminal_failures

    def record_terminal(self, job: Job) -> None:
        """Add a job that reached SUCCESS or exhausted its retries."""
        if job.status == JobStatus.SUCCESS:
            self.successes += 1
        elif job.status == JobStatus.FAILED:
            self.terminal_failures += 1
        else:
            raise ValueError(f"Job {job.external_id} is not terminal (status={job.status.value})")

        self.sum_wait_ms += job.wait_ms
        self.sum_service_ms += job.service_ms
        self.sum_turnaround_ms += job.turnaround_ms

    def _avg(self, total: int) -> float:
        return total / self.total_jobs if self.total_jobs else 0.0

    def summarize(self, run_id: str, started_at: int, finished_at: int) -> RunSummary:
        wall_clock_sec = max(MIN_WALL_CLOCK_SEC, (finished_at - started_at) / 1000)
        return RunSummary(
            run_id=run_id,
            started_at=started_at,
            finished_at=finished_at,
            total_jobs=self.total_jobs,
            successes=self.successes,
            terminal_failures=self.terminal_failures,
            avg_wait_ms=self._avg(self.sum_wait_ms),
            avg_service_ms=self._avg(self.sum_service_ms),
            avg_turnaround_ms=self._avg(self.sum_turnaround_ms),
            throughput_jobs_per_second=self.successes / wall_clock_sec,
        )
