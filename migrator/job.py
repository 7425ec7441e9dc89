"""
Job definitions, upsert outcomes and the shared migration context
"""

import enum
import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy import DateTime, bindparam, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from migrator.identity_map import IdentityMap
from migrator.transformers.normalizer import gender_name
from models import destination
from models.base import RunMode
from schemas.legacy import LegacyRow
import logging

logger = logging.getLogger(__name__)


# ============================================================================
# OUTCOMES
# ============================================================================

class OutcomeKind(str, enum.Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED_MISSING_DEPENDENCY = "skipped_missing_dependency"


@dataclass(frozen=True)
class MissingReference:
    """
    A required reference that could not be resolved.

    legacy_id is None when the source row has no value at all (permanently
    absent); otherwise the referenced record is not migrated yet.
    """
    entity: str
    legacy_id: Optional[str] = None

    def describe(self) -> str:
        if self.legacy_id is None:
            return f"{self.entity} (no legacy reference)"
        return f"{self.entity}={self.legacy_id} (not migrated)"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    new_id: Optional[str] = None
    missing: Tuple[MissingReference, ...] = ()

    @classmethod
    def written(cls, new_id: str, existed: bool) -> "Outcome":
        kind = OutcomeKind.UPDATED if existed else OutcomeKind.INSERTED
        return cls(kind, new_id=new_id)

    @classmethod
    def skipped(cls, *missing: MissingReference) -> "Outcome":
        return cls(OutcomeKind.SKIPPED_MISSING_DEPENDENCY, missing=tuple(missing))

    @property
    def is_skip(self) -> bool:
        return self.kind == OutcomeKind.SKIPPED_MISSING_DEPENDENCY

    @property
    def reason(self) -> str:
        if not self.is_skip:
            return self.kind.value
        refs = ", ".join(m.describe() for m in self.missing) or "unknown reference"
        return f"skipped: missing dependency {refs}"


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass
class ReferenceCache:
    """
    Small lookup tables read from the destination schema.

    Refreshed at every tier boundary so values produced by an earlier tier
    (states, genders, semesters) are visible to the tiers that follow.
    """
    state_by_uf: Dict[str, str] = field(default_factory=dict)
    gender_by_name: Dict[str, str] = field(default_factory=dict)
    default_gender_id: Optional[str] = None
    default_semester_id: Optional[str] = None

    async def refresh(self, db: AsyncSession) -> None:
        states = await db.execute(select(destination.state.c.id, destination.state.c.acronym))
        self.state_by_uf = {
            str(acronym).upper(): state_id for state_id, acronym in states.all()
        }

        genders = (await db.execute(
            select(destination.gender.c.id, destination.gender.c.name)
            .order_by(destination.gender.c.name)
        )).all()
        self.gender_by_name = {str(name).lower(): gender_id for gender_id, name in genders}
        self.default_gender_id = genders[0][0] if genders else None

        semester = await db.execute(
            select(destination.semester.c.id)
            .order_by(destination.semester.c.name.asc().nulls_last())
            .limit(1)
        )
        self.default_semester_id = semester.scalar_one_or_none()

        # Read-only transaction; release it before rows open their own
        await db.commit()

        logger.debug(
            f"Reference cache refreshed: {len(self.state_by_uf)} states, "
            f"{len(self.gender_by_name)} genders"
        )

    def gender_id(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        name = gender_name(value)
        return self.gender_by_name.get(name.lower()) if name else None


@dataclass
class MigrationContext:
    """State shared by every upsert of a run"""
    db: AsyncSession
    identity: IdentityMap
    mode: RunMode = RunMode.FULL
    job_filter: Optional[str] = None
    lookups: ReferenceCache = field(default_factory=ReferenceCache)


# ============================================================================
# JOB
# ============================================================================

UpsertFn = Callable[[Any, MigrationContext], Awaitable[Outcome]]


@dataclass(frozen=True)
class Job:
    """
    Declarative unit of work for one legacy table.

    Attributes:
        key: Job name, also the identity-map namespace of its rows
        tier: Dependency tier; lower tiers run first
        source_table: Legacy table read by the job
        pk: Column of the extracted row used as legacy id in error reports
        row_schema: Pydantic model each extracted row is validated against
        upsert: Coroutine writing one validated row; returns an Outcome
        columns: Select list (defaults to every column)
        watermark_column: Source column filtered on by incremental runs
        watermark_field: Key of the watermark in extracted rows (when aliased)
    """
    key: str
    tier: int
    source_table: str
    pk: str
    row_schema: Type[LegacyRow]
    upsert: UpsertFn
    columns: str = "*"
    watermark_column: Optional[str] = None
    watermark_field: Optional[str] = None

    @property
    def supports_incremental(self) -> bool:
        return self.watermark_column is not None

    def extract(self, mode: RunMode, since: Optional[datetime] = None):
        """
        Source query for a run.

        Full runs (and incremental runs without a watermark column or without
        a stored checkpoint) scan the whole table. Incremental runs with a
        watermark read rows changed after `since`, oldest first, plus every
        row whose watermark is NULL.
        """
        sql = f"select {self.columns} from {self.source_table}"
        if RunMode(mode) == RunMode.INCREMENTAL and self.watermark_column and since:
            sql += (
                f" where ({self.watermark_column} > :since"
                f" or {self.watermark_column} is null)"
                f" order by {self.watermark_column}, {self.pk}"
            )
            # Legacy DATETIME columns are naive
            return text(sql).bindparams(
                bindparam("since", since.replace(tzinfo=None), type_=DateTime())
            )
        return text(sql + f" order by {self.pk}")

    def legacy_id(self, row: Mapping[str, Any]) -> Optional[str]:
        value = row.get(self.pk)
        return None if value is None else str(value)

    def watermark(self, row: Mapping[str, Any]) -> Optional[datetime]:
        name = self.watermark_field or self.watermark_column
        if not name:
            return None
        value = row.get(name)
        if isinstance(value, datetime):
            return value
        if isinstance(value, str) and value:
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                return None
        return None


def row_hash(row: Mapping[str, Any]) -> str:
    """SHA-256 of a source row, stored with its identity mapping"""
    encoded = json.dumps(dict(row), sort_keys=True, default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def sort_jobs(jobs: Sequence[Job]) -> list:
    """Ascending tier; jobs sharing a tier keep registry order"""
    return sorted(jobs, key=lambda job: job.tier)
