"""
Logging configuration
"""

import logging
import sys
from core.config import settings

# Driver and scheduler loggers that drown the per-job progress lines
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiomysql",
    "asyncpg",
    "apscheduler",
)


def setup_logging(level: str = None):
    """Configure logging for the CLI, the scheduler and the status API"""

    level_name = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured at {level_name} level")
