# ============================================================================
# File: migrator/runner.py
# Description: Dependency-ordered job runner with per-row fault isolation
# ============================================================================
"""
Migration Runner - drives every job through extract, validate, upsert.

This module provides the orchestration loop with:
- Strict ascending dependency-tier order
- One target transaction per row (identity map + destination write)
- Row-level failures recorded to the error sink, never escalated
- Job-level failures recorded to the run ledger, never escalated
- Checkpoint advancement for clean runs
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from core.exceptions import CheckpointError, ExtractionError, RowValidationError
from migrator.checkpoint import CheckpointStore, as_utc
from migrator.error_sink import ErrorSink
from migrator.identity_map import IdentityMap
from migrator.job import Job, MigrationContext, OutcomeKind, sort_jobs
from migrator.ledger import RunCounters, RunLedger
from models.base import ErrorStage, RunMode, RunStatus
import logging

logger = logging.getLogger(__name__)


@dataclass
class JobResult:
    """Summary of one job execution"""
    job: str
    run_id: int
    status: RunStatus
    counters: RunCounters = field(default_factory=RunCounters)
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job": self.job,
            "run_id": self.run_id,
            "status": self.status.value,
            "rows_read": self.counters.read,
            "rows_inserted": self.counters.inserted,
            "rows_updated": self.counters.updated,
            "rows_failed": self.counters.failed,
            "error_message": self.error_message,
        }


def error_message(exc: BaseException) -> str:
    """Driver message for database errors, str() for everything else"""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc) or type(exc).__name__


def validation_message(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )


class MigrationRunner:
    """
    Migration orchestrator

    Responsibilities:
    - Run jobs in ascending tier order, honouring the single-job filter
    - Stream source rows and validate them against the job's row schema
    - Wrap each row's upsert in its own target transaction
    - Route outcomes to counters or the error sink
    - Open and close exactly one ledger run per job
    """

    def __init__(self, source: AsyncEngine, db_session: AsyncSession, batch_size: int = 1000):
        self.source = source
        self.db = db_session
        self.batch_size = max(1, batch_size)
        self.identity = IdentityMap(db_session)
        self.ledger = RunLedger(db_session)
        self.errors = ErrorSink(db_session)
        self.checkpoints = CheckpointStore(db_session)

    async def run(
        self,
        jobs: Sequence[Job],
        mode: RunMode = RunMode.FULL,
        job_filter: Optional[str] = None
    ) -> List[JobResult]:
        """
        Run every job (or only `job_filter`) in tier order.

        Returns:
            One JobResult per executed job
        """
        ctx = MigrationContext(
            db=self.db,
            identity=self.identity,
            mode=RunMode(mode),
            job_filter=job_filter,
        )

        results: List[JobResult] = []
        current_tier = None

        for job in sort_jobs(jobs):
            if ctx.job_filter and ctx.job_filter != job.key:
                continue

            if job.tier != current_tier:
                await ctx.lookups.refresh(self.db)
                current_tier = job.tier

            results.append(await self.run_job(job, ctx))

        return results

    async def run_job(self, job: Job, ctx: MigrationContext) -> JobResult:
        run_id = await self.ledger.start(job.key, ctx.mode)
        counters = RunCounters()
        high_water: Optional[datetime] = None
        last_legacy_id: Optional[str] = None

        logger.info(f"[{job.key}] starting ({ctx.mode.value}, tier {job.tier}, run {run_id})")

        try:
            since = await self._since(job, ctx.mode)

            async with self.source.connect() as conn:
                result = await conn.stream(job.extract(ctx.mode, since))
                async for mapping in result.mappings():
                    row = dict(mapping)
                    counters.read += 1
                    await self._process_row(job, row, ctx, run_id, counters)

                    last_legacy_id = job.legacy_id(row) or last_legacy_id
                    mark = as_utc(job.watermark(row))
                    if mark and (high_water is None or mark > high_water):
                        high_water = mark

                    if counters.read % self.batch_size == 0:
                        logger.info(f"[{job.key}] {counters.read} rows")

        except Exception as e:
            await self._rollback(job)
            failure = e if isinstance(e, ExtractionError) else ExtractionError(
                "Extraction failed",
                context={
                    "job_name": job.key,
                    "source_table": job.source_table,
                    "mode": ctx.mode.value,
                },
                original_exception=e
            )
            message = error_message(e)
            logger.error(
                f"[{job.key}] failed after {counters.read} rows: {message}",
                extra={"error_context": failure.to_dict()}
            )

            await self._record_error(run_id, job, None, ErrorStage.EXTRACT, message)
            await self._finish(job, run_id, RunStatus.FAILED, message, counters)
            return JobResult(job.key, run_id, RunStatus.FAILED, counters, message)

        if counters.failed == 0:
            await self._advance_checkpoint(job, last_legacy_id, high_water)
        elif counters.read:
            logger.info(f"[{job.key}] checkpoint kept: {counters.failed} rows not written")

        await self._finish(job, run_id, RunStatus.SUCCESS, None, counters)
        logger.info(
            f"{job.key}: {counters.read} read / {counters.inserted} inserted / "
            f"{counters.updated} updated / {counters.failed} failed"
        )
        return JobResult(job.key, run_id, RunStatus.SUCCESS, counters)

    async def _since(self, job: Job, mode: RunMode) -> Optional[datetime]:
        if mode != RunMode.INCREMENTAL:
            return None
        if not job.supports_incremental:
            logger.info(f"[{job.key}] no watermark column, incremental run scans everything")
            return None

        since = await self.checkpoints.watermark(job.key)
        if since is None:
            logger.info(f"[{job.key}] no checkpoint yet, incremental run scans everything")
        return since

    async def _process_row(
        self,
        job: Job,
        row: Dict[str, Any],
        ctx: MigrationContext,
        run_id: int,
        counters: RunCounters
    ) -> None:
        legacy_id = job.legacy_id(row)

        try:
            record = job.row_schema.model_validate(row)
        except ValidationError as e:
            failure = RowValidationError(
                validation_message(e),
                context={"job_name": job.key, "legacy_id": legacy_id, "field_errors": e.errors()}
            )
            counters.failed += 1
            logger.debug(
                f"[{job.key}] row schema rejected legacy_id={legacy_id}",
                extra={"error_context": failure.to_dict()}
            )
            await self._record_error(
                run_id, job, legacy_id, ErrorStage.TRANSFORM, failure.message, row
            )
            return

        try:
            outcome = await job.upsert(record, ctx)
            if outcome.is_skip:
                await self.db.rollback()
            else:
                await self.db.commit()
        except Exception as e:
            await self._rollback(job)
            counters.failed += 1
            await self._record_error(
                run_id, job, legacy_id, ErrorStage.LOAD, error_message(e), row
            )
            return

        if outcome.is_skip:
            counters.failed += 1
            await self._record_error(
                run_id, job, legacy_id, ErrorStage.VALIDATE, outcome.reason, row
            )
        elif outcome.kind == OutcomeKind.UPDATED:
            counters.updated += 1
        else:
            counters.inserted += 1

    async def _record_error(
        self,
        run_id: int,
        job: Job,
        legacy_id: Optional[str],
        stage: ErrorStage,
        message: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> None:
        """Error-sink write; a failure here is logged and the run goes on"""
        try:
            await self.errors.record(run_id, job.key, legacy_id, stage, message, payload)
        except Exception as e:
            await self._rollback(job)
            logger.error(
                f"[{job.key}] could not record {ErrorStage(stage).value} error "
                f"for legacy_id={legacy_id} ({message}): {error_message(e)}"
            )

    async def _finish(
        self,
        job: Job,
        run_id: int,
        status: RunStatus,
        message: Optional[str],
        counters: RunCounters
    ) -> None:
        try:
            await self.ledger.finish(run_id, status, message, counters)
        except Exception as e:
            await self._rollback(job)
            logger.error(
                f"[{job.key}] could not close run {run_id} as {status.value}: {error_message(e)}"
            )

    async def _rollback(self, job: Job) -> None:
        try:
            await self.db.rollback()
        except Exception as e:
            logger.error(f"[{job.key}] target rollback failed: {error_message(e)}")

    async def _advance_checkpoint(
        self, job: Job, last_legacy_id: Optional[str], high_water: Optional[datetime]
    ) -> None:
        try:
            await self.checkpoints.advance(job.key, last_legacy_id, high_water)
        except CheckpointError as e:
            # The next incremental run rescans from the previous watermark
            logger.error(
                f"[{job.key}] {e.message}",
                extra={"error_context": e.to_dict()}
            )
