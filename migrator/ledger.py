"""
Run ledger: one migration_runs row per job execution
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import LedgerError
from models.base import RunMode, RunStatus
from models.migration_run import MigrationRun
import logging

logger = logging.getLogger(__name__)


@dataclass
class RunCounters:
    """Per-run row counters"""
    read: int = 0
    inserted: int = 0
    updated: int = 0
    failed: int = 0

    @property
    def written(self) -> int:
        return self.inserted + self.updated


class RunLedger:
    """
    Records the start and the single terminal transition of every job run.

    Every call commits, so the ledger reflects reality even when the process
    dies mid-job (the run then stays `running`).
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def start(self, job_name: str, mode: RunMode) -> int:
        """Create a `running` row and return its id"""
        run = MigrationRun(
            job_name=job_name,
            mode=RunMode(mode).value,
            status=RunStatus.RUNNING.value,
        )
        self.db.add(run)
        await self.db.commit()
        await self.db.refresh(run)

        logger.debug(f"Started run {run.id} for {job_name}")
        return run.id

    async def finish(
        self,
        run_id: int,
        status: RunStatus,
        error_message: Optional[str] = None,
        counters: Optional[RunCounters] = None
    ) -> None:
        """
        Move a running run to `success` or `failed`.

        Raises:
            LedgerError: status is not terminal, or the run is unknown or
                already finished
        """
        status = RunStatus(status)
        if status == RunStatus.RUNNING:
            raise LedgerError(
                "A run can only finish as success or failed",
                context={"run_id": run_id, "status": status.value}
            )

        counters = counters or RunCounters()
        result = await self.db.execute(
            update(MigrationRun)
            .where(
                MigrationRun.id == run_id,
                MigrationRun.status == RunStatus.RUNNING.value
            )
            .values(
                status=status.value,
                finished_at=func.now(),
                error_message=error_message,
                rows_read=counters.read,
                rows_inserted=counters.inserted,
                rows_updated=counters.updated,
                rows_failed=counters.failed,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        if result.rowcount != 1:
            raise LedgerError(
                "Run is unknown or already finished",
                context={"run_id": run_id, "status": status.value}
            )
