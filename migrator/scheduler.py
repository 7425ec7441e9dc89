import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from migrator.engine import MigrationEngine
from models.base import RunMode

logger = logging.getLogger(__name__)


class MigrationScheduler:
    """Re-runs the engine on an interval so the new schema follows the legacy one"""

    def __init__(
        self,
        engine: MigrationEngine,
        minutes: int,
        mode: RunMode = RunMode.INCREMENTAL,
        job_filter: str = None,
        batch_size: int = 1000
    ):
        self.scheduler = AsyncIOScheduler()
        self.engine = engine
        self.minutes = minutes
        self.mode = RunMode(mode)
        self.job_filter = job_filter
        self.batch_size = batch_size

    async def run_migration_job(self):
        """Job to run one migration pass"""
        logger.info(f"Scheduler: starting {self.mode.value} migration")
        try:
            await self.engine.run(
                mode=self.mode,
                job_filter=self.job_filter,
                batch_size=self.batch_size
            )
        except Exception as e:
            # Keep the schedule alive; the next tick is the retry
            logger.exception(f"Scheduler: migration pass failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_migration_job,
            trigger=IntervalTrigger(minutes=self.minutes),
            id="migration_job",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(f"Migration scheduler started (every {self.minutes} minutes)")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Migration scheduler stopped")
