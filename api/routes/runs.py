"""
Run ledger, error sink and checkpoint endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from api.dependencies import get_db
from schemas.api import (
    CheckpointInfo, ErrorInfo, ErrorListResponse, PaginationMetadata,
    RunInfo, RunListResponse
)
from models.base import ErrorStage, RunStatus
from models.checkpoint import MigrationCheckpoint
from models.migration_error import MigrationError
from models.migration_run import MigrationRun
from typing import List, Optional
import math
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Migration"])


@router.get("/runs", response_model=RunListResponse)
async def list_runs(
    request: Request,
    job: Optional[str] = Query(None, description="Filter by job key"),
    status: Optional[RunStatus] = Query(None, description="Filter by run status"),
    limit: int = Query(50, ge=1, le=500, description="Maximum runs returned"),
    db: AsyncSession = Depends(get_db)
):
    """Recent runs, newest first"""
    request_id = getattr(request.state, "request_id", "-")
    logger.info(f"[{request_id}] GET /runs - job={job}, status={status}, limit={limit}")

    filters = []
    if job:
        filters.append(MigrationRun.job_name == job)
    if status:
        filters.append(MigrationRun.status == status.value)

    query = select(MigrationRun)
    if filters:
        query = query.where(and_(*filters))
    query = query.order_by(MigrationRun.id.desc()).limit(limit)

    result = await db.execute(query)
    items = [RunInfo.model_validate(run) for run in result.scalars().all()]

    return RunListResponse(
        items=items,
        count=len(items),
        filters_applied={k: v for k, v in {
            "job": job,
            "status": status.value if status else None,
        }.items() if v is not None}
    )


@router.get("/runs/{run_id}", response_model=RunInfo)
async def get_run(run_id: int, db: AsyncSession = Depends(get_db)):
    run = await db.get(MigrationRun, run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    return RunInfo.model_validate(run)


@router.get("/runs/{run_id}/errors", response_model=ErrorListResponse)
async def get_run_errors(
    run_id: int,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=1000, description="Items per page"),
    stage: Optional[ErrorStage] = Query(None, description="Filter by stage"),
    db: AsyncSession = Depends(get_db)
):
    """
    Error-sink entries recorded by one run, oldest first.
    """
    if await db.get(MigrationRun, run_id) is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")

    filters = [MigrationError.run_id == run_id]
    if stage:
        filters.append(MigrationError.stage == stage.value)

    count_result = await db.execute(
        select(func.count()).select_from(MigrationError).where(and_(*filters))
    )
    total_items = count_result.scalar()

    # Calculate pagination
    total_pages = math.ceil(total_items / page_size) if total_items > 0 else 0
    offset = (page - 1) * page_size

    result = await db.execute(
        select(MigrationError)
        .where(and_(*filters))
        .order_by(MigrationError.id)
        .offset(offset)
        .limit(page_size)
    )
    items = [ErrorInfo.model_validate(error) for error in result.scalars().all()]

    return ErrorListResponse(
        run_id=run_id,
        items=items,
        pagination=PaginationMetadata(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        )
    )


@router.get("/checkpoints", response_model=List[CheckpointInfo])
async def list_checkpoints(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(MigrationCheckpoint).order_by(MigrationCheckpoint.job_name)
    )
    return [CheckpointInfo.model_validate(cp) for cp in result.scalars().all()]
