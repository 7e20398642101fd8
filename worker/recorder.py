"""
SQL recorder — persists the dispatcher's events.

- attempt_completed → one row in job_attempts
- run_finished      → one row in runs

Each event is written in its own short transaction using a fresh session
from the factory (same pattern as the executor in a worker thread: open,
commit, close). Nothing is batched: a crash mid-run still leaves every
attempt up to that point on disk.

Database errors are NOT swallowed. The session is rolled back and the
exception propagates, which aborts the run. Losing the record of a run is
treated as fatal, unlike a simulated job failure.
"""

import logging

from sqlalchemy.orm import Session

from models.events import JobAttemptCompleted, RunSummary
from models.job_attempt import JobAttempt
from models.run import Run
from worker.observers import RunObserver

logger = logging.getLogger(__name__)


class SqlRecorder(RunObserver):

    def __init__(self, db_session_factory):
        self._db_session_factory = db_session_factory
        self.attempts_recorded = 0

    def attempt_completed(self, event: JobAttemptCompleted) -> None:
        self._write(JobAttempt(
            run_id=event.run_id,
            external_id=event.external_id,
            priority=event.priority,
            attempt=event.attempt,
            status=event.status.value,
            fail_reason=event.fail_reason.value,
            enqueue_timestamp=event.enqueue_timestamp,
            start_timestamp=event.start_timestamp,
            end_timestamp=event.end_timestamp,
            wait_ms=event.wait_ms,
            service_ms=event.service_ms,
            turnaround_ms=event.turnaround_ms,
        ))
        self.attempts_recorded += 1

    def run_finished(self, summary: RunSummary) -> None:
        self._write(Run(**summary.model_dump()))
        logger.info(f"Recorded run {summary.run_id} ({self.attempts_recorded} attempts)")

    def _write(self, row) -> None:
        session: Session = self._db_session_factory()
        try:
            session.add(row)
            session.commit()
        except Exception:
            session.rollback()
            logger.error(f"Failed to record {row!r}")
            raise
        finally:
            session.close()
