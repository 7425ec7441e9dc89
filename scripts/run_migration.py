"""
Script to migrate the legacy database into the new schema
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from migrator.engine import MigrationEngine
from migrator.job import sort_jobs
from migrator.jobs import JOBS
from migrator.scheduler import MigrationScheduler
from models.base import RunMode

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Migrate legacy tables into the new schema")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in RunMode],
        default=None,
        help="full re-reads every row, incremental only rows past the checkpoint "
             "(default: MIGRATION_MODE, or incremental with --schedule-minutes)"
    )
    parser.add_argument(
        "--table",
        default=settings.MIGRATION_TABLE,
        help="run only this job key"
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.BATCH_SIZE,
        help="progress log interval in rows"
    )
    parser.add_argument(
        "--schedule-minutes",
        type=int,
        default=settings.SCHEDULE_MINUTES,
        help="keep running, one pass every N minutes"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="print registered job keys in execution order and exit"
    )
    return parser.parse_args(argv)


def run_mode(args: argparse.Namespace) -> RunMode:
    """Explicit --mode wins; scheduled runs default to incremental"""
    if args.mode:
        return RunMode(args.mode)
    if args.schedule_minutes:
        return RunMode.INCREMENTAL
    return RunMode(settings.MIGRATION_MODE or RunMode.FULL.value)


def build_scheduler(engine: MigrationEngine, args: argparse.Namespace) -> MigrationScheduler:
    return MigrationScheduler(
        engine,
        minutes=args.schedule_minutes,
        mode=run_mode(args),
        job_filter=args.table,
        batch_size=args.batch_size
    )


async def run_once(engine: MigrationEngine, args: argparse.Namespace):
    results = await engine.run(
        mode=run_mode(args),
        job_filter=args.table,
        batch_size=args.batch_size
    )
    for result in results:
        logger.info(
            f"{result.job}: {result.status.value} "
            f"(run {result.run_id}, {result.counters.read} read, {result.counters.failed} failed)"
        )
    return results


async def run_scheduled(engine: MigrationEngine, args: argparse.Namespace):
    engine.check_filter(args.table)
    scheduler = build_scheduler(engine, args)
    # First pass right away, then on the interval
    await scheduler.run_migration_job()
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()


async def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()

    if args.list:
        for job in sort_jobs(JOBS):
            print(f"{job.tier}  {job.key}")
        return 0

    try:
        engine = MigrationEngine.from_settings(JOBS)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        if args.schedule_minutes:
            await run_scheduled(engine, args)
        else:
            await run_once(engine, args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Migration aborted: {str(e)}")
        return 1
    finally:
        await engine.dispose()

    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(0)
