"""
Error sink: append-only per-row failure log (migration_errors)
"""

import json
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models.base import ErrorStage
from models.migration_error import MigrationError
import logging

logger = logging.getLogger(__name__)


def to_payload(row: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Make a source row JSON-safe (dates, decimals and bytes become strings)"""
    if row is None:
        return None
    return json.loads(json.dumps(dict(row), default=str))


class ErrorSink:
    """
    Appends one immutable record per failed or skipped row.

    Records are written in their own transaction so they survive the
    rollback of the row that produced them.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def record(
        self,
        run_id: Optional[int],
        job_name: str,
        legacy_id: Optional[str],
        stage: ErrorStage,
        message: str,
        payload: Optional[Mapping[str, Any]] = None
    ) -> None:
        stage = ErrorStage(stage)
        self.db.add(MigrationError(
            run_id=run_id,
            job_name=job_name,
            legacy_id=legacy_id,
            stage=stage.value,
            error_message=message,
            payload=to_payload(payload),
        ))
        await self.db.commit()

        logger.warning(
            f"[{job_name}] {stage.value} error for legacy_id={legacy_id}: {message}"
        )
