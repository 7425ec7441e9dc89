import argparse
import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_engine
from core.logging import setup_logging
# Importing the package registers every control-table model on Base
from models import Base
from models.destination import destination_metadata

logger = logging.getLogger(__name__)


async def init_database(with_destination: bool = False):
    settings.require_databases("TARGET_DATABASE_URL")
    logger.info("Connecting to target database...")
    engine = create_engine(settings.TARGET_DATABASE_URL, echo=True)

    try:
        async with engine.begin() as conn:
            logger.info("Creating control tables...")
            await conn.run_sync(Base.metadata.create_all)
            if with_destination:
                # Normally owned by the application's own migrations
                logger.info("Creating destination tables...")
                await conn.run_sync(destination_metadata.create_all)
            logger.info("Tables created successfully.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create migration tables on the target database")
    parser.add_argument("--with-destination", action="store_true")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(init_database(args.with_destination))
