import pytest
from unittest.mock import AsyncMock, MagicMock
from migrator.scheduler import MigrationScheduler
from models.base import RunMode


@pytest.mark.asyncio
async def test_scheduler_initialization():
    scheduler = MigrationScheduler(MagicMock(), minutes=15)
    assert scheduler.scheduler is not None
    assert scheduler.mode == RunMode.INCREMENTAL
    assert scheduler.minutes == 15


@pytest.mark.asyncio
async def test_scheduler_job_execution():
    engine = MagicMock()
    engine.run = AsyncMock(return_value=[])

    scheduler = MigrationScheduler(engine, minutes=5, job_filter="state", batch_size=50)
    await scheduler.run_migration_job()

    engine.run.assert_awaited_once_with(
        mode=RunMode.INCREMENTAL, job_filter="state", batch_size=50
    )


@pytest.mark.asyncio
async def test_scheduler_survives_failed_pass():
    engine = MagicMock()
    engine.run = AsyncMock(side_effect=RuntimeError("target unavailable"))

    scheduler = MigrationScheduler(engine, minutes=5)
    await scheduler.run_migration_job()

    engine.run.assert_awaited_once()


@pytest.mark.asyncio
async def test_scheduler_registers_interval_job():
    scheduler = MigrationScheduler(MagicMock(), minutes=30)
    scheduler.start()
    try:
        job = scheduler.scheduler.get_job("migration_job")
        assert job is not None
        assert job.trigger.interval.total_seconds() == 30 * 60
    finally:
        scheduler.stop()
