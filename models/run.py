"""
Run ORM model — maps to the "runs" table.

One row per dispatcher run, written once when the run finishes.
The columns are exactly the fields of the RunSummary event.
Timestamps are integer milliseconds from the dispatcher's clock,
not wall-clock datetimes.
"""

from sqlalchemy import String, Integer, BigInteger, Float
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Run(Base):
    __tablename__ = "runs"

    run_id: Mapped[str] = mapped_column(String(32), primary_key=True)

    # ── Clock (ms) ──────────────────────────────────────────────
    started_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    finished_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # ── Counts ──────────────────────────────────────────────────
    total_jobs: Mapped[int] = mapped_column(Integer, nullable=False)
    successes: Mapped[int] = mapped_column(Integer, nullable=False)
    terminal_failures: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Averages & throughput ───────────────────────────────────
    avg_wait_ms: Mapped[float] = mapped_column(Float, nullable=False)
    avg_service_ms: Mapped[float] = mapped_column(Float, nullable=False)
    avg_turnaround_ms: Mapped[float] = mapped_column(Float, nullable=False)
    throughput_jobs_per_second: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<Run {self.run_id} {self.successes}/{self.total_jobs} ok>"
