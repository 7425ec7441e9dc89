"""
Persistent legacy key -> canonical id map, one namespace per entity
"""

from typing import Any, NamedTuple, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from core.exceptions import IdentityMapError
from migrator.upsert import build_upsert
from models.migration_map import MigrationMapping
import logging

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Mint a canonical id (UUIDv7: globally unique and time-sortable)"""
    return str(uuid7())


def normalize_legacy_id(value: Any) -> Optional[str]:
    """Legacy keys are compared as trimmed strings; None and blanks are absent"""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ResolvedId(NamedTuple):
    new_id: str
    existed: bool


class IdentityMap:
    """
    Bijection between legacy identifiers and canonical new ids.

    Legacy tables use two key schemes for the same record (an integer
    sequence `co_seq_*` column and a char(36) UUID `id` column). Both can be
    registered for one canonical id with `put_both`, and references can be
    resolved with `get_any` regardless of which scheme the referencing row
    uses.

    Writes are not committed here: `put` joins the caller's transaction so
    the destination write and the mapping commit succeed or fail together.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self, entity: str, legacy_id: Any) -> Optional[str]:
        """Pure lookup; returns None when unmapped or when legacy_id is blank"""
        key = normalize_legacy_id(legacy_id)
        if key is None:
            return None

        result = await self.db.execute(
            select(MigrationMapping.new_id).where(
                MigrationMapping.entity == entity,
                MigrationMapping.legacy_id == key
            )
        )
        return result.scalar_one_or_none()

    async def get_any(self, entity: str, *candidates: Any) -> Optional[str]:
        """Try each candidate legacy key in order and return the first hit"""
        for candidate in candidates:
            key = normalize_legacy_id(candidate)
            if key is None:
                continue
            found = await self.get(entity, key)
            if found:
                return found
        return None

    async def resolve(self, entity: str, legacy_id: Any) -> ResolvedId:
        """Existing mapping, or a freshly minted id that is not yet persisted"""
        existing = await self.get(entity, legacy_id)
        if existing:
            return ResolvedId(existing, True)
        return ResolvedId(new_id(), False)

    async def resolve_id(self, entity: str, legacy_id: Any) -> str:
        return (await self.resolve(entity, legacy_id)).new_id

    async def put(
        self,
        entity: str,
        legacy_id: Any,
        new_id: str,
        source_hash: Optional[str] = None
    ) -> None:
        """
        Upsert a mapping and refresh migrated_at.

        On conflict new_id is overwritten with the given value, so callers
        must pass the id obtained from `resolve`, never a freshly minted one.
        """
        key = normalize_legacy_id(legacy_id)
        if key is None:
            raise IdentityMapError(
                "Cannot map a blank legacy id",
                context={"entity": entity, "legacy_id": legacy_id}
            )

        stmt = build_upsert(
            self.db,
            MigrationMapping.__table__,
            values={
                "entity": entity,
                "legacy_id": key,
                "new_id": new_id,
                "source_hash": source_hash,
                "migrated_at": func.now(),
            },
            conflict=["entity", "legacy_id"],
            update_columns=["new_id", "source_hash"],
            touch=["migrated_at"],
        )
        await self.db.execute(stmt)

    async def put_both(
        self,
        entity: str,
        legacy_key_a: Any,
        legacy_key_b: Any,
        new_id: str,
        source_hash: Optional[str] = None
    ) -> int:
        """
        Register up to two legacy keys for the same canonical id.

        Absent keys are skipped and keys that normalize to the same string are
        written once. Returns the number of mappings written.
        """
        a = normalize_legacy_id(legacy_key_a)
        b = normalize_legacy_id(legacy_key_b)

        written = 0
        if a:
            await self.put(entity, a, new_id, source_hash)
            written += 1
        if b and b != a:
            await self.put(entity, b, new_id, source_hash)
            written += 1
        return written
