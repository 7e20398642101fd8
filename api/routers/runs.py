"""
Run history endpoints (read-only).

GET /runs/                        → List recorded runs, newest first, paginated
GET /runs/{run_id}                → One run summary
GET /runs/{run_id}/attempts       → Every attempt of a run, in execution order

Runs are written by the dispatcher's SqlRecorder; the API never starts or
modifies a run.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db
from api.schemas.run import JobAttemptResponse, RunListResponse, RunResponse
from models.job_attempt import JobAttempt
from models.run import Run

router = APIRouter(prefix="/runs", tags=["runs"])


async def _get_run_or_404(db: AsyncSession, run_id: str) -> Run:
    run = await db.get(Run, run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    return run


@router.get("/", response_model=RunListResponse)
async def list_runs(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Runs per page"),
    db: AsyncSession = Depends(get_db),
) -> RunListResponse:
    """
    List runs, newest first.

    started_at is a monotonic clock reading, so it orders runs made on the
    same machine. finished_at breaks ties.
    """
    total = (await db.execute(select(func.count(Run.run_id)))).scalar() or 0

    offset = (page - 1) * page_size
    query = (
        select(Run)
        .order_by(Run.started_at.desc(), Run.finished_at.desc())
        .offset(offset)
        .limit(page_size)
    )
    runs = (await db.execute(query)).scalars().all()

    return RunListResponse(
        runs=[RunResponse.model_validate(r) for r in runs],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{run_id}", response_model=RunResponse)
async def get_run(
    run_id: str,
    db: AsyncSession = Depends(get_db),
) -> RunResponse:
    return RunResponse.model_validate(await _get_run_or_404(db, run_id))


@router.get("/{run_id}/attempts", response_model=list[JobAttemptResponse])
async def list_attempts(
    run_id: str,
    external_id: Optional[int] = Query(None, ge=1, description="Only this job's attempts"),
    db: AsyncSession = Depends(get_db),
) -> list[JobAttemptResponse]:
    """
    Attempts in the order they were executed (insertion order).

    Filtering by external_id shows a single job's retry history:
    attempt numbers rising, priority aging up by one per failure.
    """
    await _get_run_or_404(db, run_id)

    conditions = [JobAttempt.run_id == run_id]
    if external_id is not None:
        conditions.append(JobAttempt.external_id == external_id)

    query = select(JobAttempt).where(*conditions).order_by(JobAttempt.id)
    attempts = (await db.execute(query)).scalars().all()
    return [JobAttemptResponse.model_validate(a) for a in attempts]
