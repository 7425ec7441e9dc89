"""
Dialect-aware INSERT ... ON CONFLICT DO UPDATE builder
"""

from typing import Any, Dict, Iterable, Mapping

from sqlalchemy import Table, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import UpsertError

# SQLite is the local/test target; production targets PostgreSQL
_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_name(session: AsyncSession) -> str:
    return session.bind.dialect.name


def build_upsert(
    session: AsyncSession,
    table: Table,
    values: Mapping[str, Any],
    conflict: Iterable[str],
    update_columns: Iterable[str] = (),
    touch: Iterable[str] = ("updated_at",),
):
    """
    Build an upsert for `table`.

    Args:
        values: Column values for the INSERT
        conflict: Conflict target (primary key or unique columns)
        update_columns: Columns copied from the proposed row on conflict
        touch: Columns set to now() on conflict

    Returns:
        Executable insert statement (add `.returning(...)` as needed)
    """
    name = dialect_name(session)
    insert = _INSERTS.get(name)
    if insert is None:
        raise UpsertError(
            f"Upsert not supported for dialect {name}",
            context={"table_name": table.name, "conflict_fields": list(conflict)}
        )

    stmt = insert(table).values(**values)
    set_: Dict[str, Any] = {col: stmt.excluded[col] for col in update_columns}
    for col in touch:
        set_[col] = func.now()

    return stmt.on_conflict_do_update(index_elements=list(conflict), set_=set_)
