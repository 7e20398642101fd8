"""
JobAttempt ORM model — maps to the "job_attempts" table.

One row per executed attempt, success or failure. A job that fails twice
and then succeeds has three rows sharing the same (run_id, external_id).
The columns are exactly the fields of the JobAttemptCompleted event.
"""

from sqlalchemy import String, Integer, BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.enums import FailReason


class JobAttempt(Base):
    __tablename__ = "job_attempts"

    # ── Identity ────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    external_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Scheduling state at the end of the attempt ──────────────
    priority: Mapped[int] = mapped_column(Integer, nullable=False)
    attempt: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    fail_reason: Mapped[str] = mapped_column(
        String(50), default=FailReason.NONE.value, nullable=False
    )

    # ── Timestamps (ms) ─────────────────────────────────────────
    enqueue_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    start_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # ── Derived timings ─────────────────────────────────────────
    wait_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    service_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    turnaround_ms: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<JobAttempt run={self.run_id} job={self.external_id} att={self.attempt} {self.status}>"
