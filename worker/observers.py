"""
Run observers — the dispatcher's only way of talking to the outside world.

The dispatcher calls, in registration order:
- run_started(run_id, started_at)   once, before the first job is seeded
- attempt_completed(event)          once per executed attempt
- run_finished(summary)             once, after the queue drains

Observers get fully-built, immutable events and cannot influence control
flow. An observer that raises (e.g. the recorder losing its database) is a
fatal error for the run; the dispatcher does not swallow it.

Two implementations ship with the project:
- LoggingObserver (here): human-readable console lines
- SqlRecorder (worker/recorder.py): one row per attempt + one per run
"""

import logging

from models.events import JobAttemptCompleted, RunSummary

logger = logging.getLogger(__name__)


class RunObserver:
    """Base observer. Every hook is a no-op so subclasses override only what they need."""

    def run_started(self, run_id: str, started_at: int) -> None:
        pass

    def attempt_completed(self, event: JobAttemptCompleted) -> None:
        pass

    def run_finished(self, summary: RunSummary) -> None:
        pass


def format_attempt(event: JobAttemptCompleted) -> str:
    line = (
        f"[Job {event.external_id} | prio={event.priority} | att={event.attempt}] "
        f"wait={event.wait_ms}ms, service={event.service_ms}ms, "
        f"turn={event.turnaround_ms}ms -> {event.status.value}"
    )
    if event.fail_reason.value:
        line += f" ({event.fail_reason.value})"
    return line


def format_summary(summary: RunSummary) -> str:
    return "\n".join([
        "=== RUN SUMMARY ===",
        f"Total jobs:  {summary.total_jobs}",
        f"Success:     {summary.successes}",
        f"Failed:      {summary.terminal_failures}",
        f"Avg Wait:    {summary.avg_wait_ms:.2f} ms",
        f"Avg Service: {summary.avg_service_ms:.2f} ms",
        f"Avg Turn:    {summary.avg_turnaround_ms:.2f} ms",
        f"Throughput:  {summary.throughput_jobs_per_second:.2f} jobs/s",
    ])


class LoggingObserver(RunObserver):

    def __init__(self, log: logging.Logger = logger):
        self._log = log

    def run_started(self, run_id: str, started_at: int) -> None:
        self._log.info(f"Run {run_id} started")

    def attempt_completed(self, event: JobAttemptCompleted) -> None:
        self._log.info(format_attempt(event))

    def run_finished(self, summary: RunSummary) -> None:
        self._log.info("\n" + format_summary(summary))
