"""
Helpers shared by the per-entity upserts
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Table, func

from migrator.identity_map import normalize_legacy_id
from migrator.job import MigrationContext, MissingReference
from migrator.upsert import build_upsert

Reference = Tuple[str, Any, Optional[str]]

_NOT_UPDATED = {"id", "created_at"}


def stamped(values: Dict[str, Any], created_at=None, updated_at=None) -> Dict[str, Any]:
    """Add created_at/updated_at, falling back to now() like the new schema does"""
    values["created_at"] = created_at or func.now()
    values["updated_at"] = updated_at or func.now()
    return values


async def write(
    ctx: MigrationContext,
    table: Table,
    values: Dict[str, Any],
    conflict: Sequence[str] = ("id",),
    returning: Optional[str] = None,
):
    """
    Upsert one destination row; last write wins for every column except the
    conflict key and created_at.
    """
    update_columns = [
        col for col in values if col not in _NOT_UPDATED and col not in conflict
    ]
    stmt = build_upsert(
        ctx.db, table, values,
        conflict=conflict,
        update_columns=update_columns,
        touch=(),
    )
    if returning:
        stmt = stmt.returning(table.c[returning])
        result = await ctx.db.execute(stmt)
        return result.scalar_one()

    await ctx.db.execute(stmt)
    return None


def missing(*refs: Reference) -> List[MissingReference]:
    """References (entity, legacy value, resolved id) that did not resolve"""
    return [
        MissingReference(entity, normalize_legacy_id(legacy))
        for entity, legacy, resolved in refs
        if not resolved
    ]
