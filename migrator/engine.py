"""
Migration engine: explicit owner of the source engine, the target session
factory and the job registry.
"""

from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import Settings, settings as default_settings
from core.database import create_engine, create_session_factory
from core.exceptions import ConfigurationError
from migrator.job import Job, sort_jobs
from migrator.runner import JobResult, MigrationRunner
from models.base import Base, RunMode, RunStatus
import logging

logger = logging.getLogger(__name__)


class MigrationEngine:
    """
    Everything one migration needs, passed explicitly.

    Several engines (e.g. one per test) can coexist because nothing is kept
    in module globals.
    """

    def __init__(self, source: AsyncEngine, target: AsyncEngine, jobs: Sequence[Job]):
        keys = [job.key for job in jobs]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ConfigurationError(
                "Duplicate job keys",
                context={"job_keys": duplicates}
            )

        self.source = source
        self.target = target
        self.jobs = sort_jobs(jobs)
        self.session_factory = create_session_factory(target)

    @classmethod
    def from_settings(cls, jobs: Sequence[Job], config: Settings = None) -> "MigrationEngine":
        """Build engines from configuration; fails before touching any store"""
        config = config or default_settings
        config.require_databases()
        echo = config.ENVIRONMENT == "development" and config.LOG_LEVEL.upper() == "DEBUG"
        return cls(
            source=create_engine(config.SOURCE_DATABASE_URL, echo=echo),
            target=create_engine(config.TARGET_DATABASE_URL, echo=echo),
            jobs=jobs,
        )

    @property
    def job_keys(self) -> List[str]:
        return [job.key for job in self.jobs]

    def check_filter(self, job_filter: Optional[str]) -> None:
        if job_filter and job_filter not in self.job_keys:
            raise ConfigurationError(
                f"Unknown job '{job_filter}'",
                context={"job_filter": job_filter, "known_jobs": self.job_keys}
            )

    async def ensure_control_tables(self) -> None:
        """Create the engine's control tables when missing"""
        async with self.target.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def run(
        self,
        mode: RunMode = RunMode.FULL,
        job_filter: Optional[str] = None,
        batch_size: int = 1000
    ) -> List[JobResult]:
        """Run the registry once and return one result per executed job"""
        mode = RunMode(mode)
        self.check_filter(job_filter)

        await self.ensure_control_tables()

        async with self.session_factory() as session:
            runner = MigrationRunner(self.source, session, batch_size=batch_size)
            results = await runner.run(self.jobs, mode=mode, job_filter=job_filter)

        failed = [r.job for r in results if r.status == RunStatus.FAILED]
        logger.info(
            f"Migration finished ({mode.value}): {len(results)} jobs, "
            f"{len(failed)} failed{': ' + ', '.join(failed) if failed else ''}"
        )
        return results

    async def dispose(self) -> None:
        await self.source.dispose()
        await self.target.dispose()
