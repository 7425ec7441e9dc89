"""
Per-job watermark used by incremental runs
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import CheckpointError
from migrator.upsert import build_upsert
from models.checkpoint import MigrationCheckpoint
import logging

logger = logging.getLogger(__name__)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps (MySQL DATETIME, SQLite) are treated as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CheckpointStore:
    """Reads and advances migration_checkpoints rows"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self, job_name: str) -> Optional[MigrationCheckpoint]:
        result = await self.db.execute(
            select(MigrationCheckpoint)
            .where(MigrationCheckpoint.job_name == job_name)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def watermark(self, job_name: str) -> Optional[datetime]:
        checkpoint = await self.get(job_name)
        return as_utc(checkpoint.last_updated_at) if checkpoint else None

    async def advance(
        self,
        job_name: str,
        last_legacy_id: Optional[str],
        last_updated_at: Optional[datetime]
    ) -> None:
        """
        Upsert the checkpoint. The watermark never moves backwards: the
        stored value wins when it is later than the proposed one.
        """
        try:
            checkpoint = await self.get(job_name)
            current = as_utc(checkpoint.last_updated_at) if checkpoint else None
            proposed = as_utc(last_updated_at)
            if checkpoint and last_legacy_id is None:
                last_legacy_id = checkpoint.last_legacy_id
            if current and (proposed is None or current > proposed):
                proposed = current

            stmt = build_upsert(
                self.db,
                MigrationCheckpoint.__table__,
                values={
                    "job_name": job_name,
                    "last_legacy_id": last_legacy_id,
                    "last_updated_at": proposed,
                    "updated_at": func.now(),
                },
                conflict=["job_name"],
                update_columns=["last_legacy_id", "last_updated_at"],
            )
            await self.db.execute(stmt)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            raise CheckpointError(
                "Failed to advance checkpoint",
                context={"job_name": job_name, "operation": "write"},
                original_exception=e
            )

        logger.info(
            f"Checkpoint for {job_name} advanced "
            f"(last_legacy_id={last_legacy_id}, last_updated_at={proposed})"
        )
