"""
Pydantic schemas for the /runs endpoints.

These are NOT database models — they define the HTTP API contract.
Field names match the RunSummary / JobAttemptCompleted events, so a
client reading the API sees the same shape the dispatcher emitted.
"""

from pydantic import BaseModel


class RunResponse(BaseModel):
    """One finished run — returned by GET /runs/{run_id}."""

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

    # from_attributes=True tells Pydantic to read from SQLAlchemy model attributes
    model_config = {"from_attributes": True}


class RunListResponse(BaseModel):
    """Paginated list of runs — returned by GET /runs/."""

    runs: list[RunResponse]
    total: int
    page: int
    page_size: int


class JobAttemptResponse(BaseModel):
    """One executed attempt of one job."""

    id: int
    run_id: str
    external_id: int
    priority: int
    attempt: int
    status: str
    fail_reason: str
    enqueue_timestamp: int
    start_timestamp: int
    end_timestamp: int
    wait_ms: int
    service_ms: int
    turnaround_ms: int

    model_config = {"from_attributes": True}
