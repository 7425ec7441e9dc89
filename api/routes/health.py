"""
Health check endpoint with database and migration job status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, text, func
from api.dependencies import get_db
from schemas.api import HealthCheckResponse, JobHealth
from models.base import RunStatus
from models.migration_run import MigrationRun
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Target database connectivity status
    - Latest run status of every job that has run
    """

    # Check database connectivity
    db_connected = False

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    jobs = []
    failed_jobs = 0

    if db_connected:
        try:
            latest = (
                select(func.max(MigrationRun.id).label("id"))
                .group_by(MigrationRun.job_name)
                .subquery()
            )
            result = await db.execute(
                select(MigrationRun)
                .join(latest, MigrationRun.id == latest.c.id)
                .order_by(MigrationRun.job_name)
            )
            for run in result.scalars().all():
                if run.status == RunStatus.FAILED.value:
                    failed_jobs += 1
                jobs.append(JobHealth(
                    job_name=run.job_name,
                    status=run.status,
                    run_id=run.id,
                    started_at=run.started_at,
                    finished_at=run.finished_at,
                    rows_failed=run.rows_failed,
                ))
        except Exception as e:
            logger.error(f"Failed to fetch migration runs: {str(e)}")

    return HealthCheckResponse(
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        jobs=jobs,
        total_jobs=len(jobs),
        failed_jobs=failed_jobs
    )
