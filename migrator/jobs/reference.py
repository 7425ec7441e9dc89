"""
Tier 1 jobs: states, small dimension tables and users
"""

from migrator.job import Job, MigrationContext, Outcome, row_hash
from migrator.jobs.common import stamped, write
from migrator.transformers.normalizer import map_user_role, optional_str, required_str
from models import destination
from schemas.legacy import DimensionRow, StateRow, UserRow


async def upsert_state(row: StateRow, ctx: MigrationContext) -> Outcome:
    resolved = await ctx.identity.resolve("state", row.id)
    await write(ctx, destination.state, stamped({
        "id": resolved.new_id,
        "name": required_str(row.name),
        "acronym": row.acronym,
    }))
    await ctx.identity.put("state", row.id, resolved.new_id, row_hash(row.model_dump()))
    return Outcome.written(resolved.new_id, resolved.existed)


def dimension_upsert(entity: str):
    """Upsert for id/name lookup tables; entity is also the destination table"""
    table = destination.destination_metadata.tables[entity]

    async def upsert(row: DimensionRow, ctx: MigrationContext) -> Outcome:
        resolved = await ctx.identity.resolve(entity, row.id)
        await write(ctx, table, stamped(
            {"id": resolved.new_id, "name": required_str(row.name)},
            row.created_at, row.updated_at,
        ))
        await ctx.identity.put(entity, row.id, resolved.new_id, row_hash(row.model_dump()))
        return Outcome.written(resolved.new_id, resolved.existed)

    upsert.__name__ = f"upsert_{entity}"
    return upsert


async def upsert_user(row: UserRow, ctx: MigrationContext) -> Outcome:
    resolved = await ctx.identity.resolve("user", row.co_seq_usuario)
    email = required_str(row.email or f"{resolved.new_id}@legacy.local").lower()

    # A mapped user is updated in place, email included. Otherwise email is
    # the natural key: an existing user with the same email keeps its id and
    # the legacy keys are mapped onto it
    conflict = ("id",) if resolved.existed else ("email",)
    user_id = await write(ctx, destination.user, stamped({
        "id": resolved.new_id,
        "name": required_str(row.name or row.ds_login or "Sem nome"),
        "email": email,
        "password": row.password_hash or row.ds_senha or "legacy",
        "image": optional_str(row.image),
        "role": map_user_role(row.role),
    }, row.created_at, row.updated_at), conflict=conflict, returning="id")

    await ctx.identity.put_both(
        "user", row.co_seq_usuario, row.id, user_id, row_hash(row.model_dump())
    )
    return Outcome.written(user_id, resolved.existed or user_id != resolved.new_id)


def _dimension(key: str, source_table: str, columns: str, pk: str = "id",
               watermark_column: str = None) -> Job:
    return Job(
        key=key,
        tier=1,
        source_table=source_table,
        pk=pk,
        row_schema=DimensionRow,
        upsert=dimension_upsert(key),
        columns=columns,
        watermark_column=watermark_column,
        watermark_field="updated_at" if watermark_column else None,
    )


JOBS = [
    Job(
        key="state",
        tier=1,
        source_table="tb_estados",
        pk="id",
        row_schema=StateRow,
        upsert=upsert_state,
        columns="id, estado as name, uf as acronym",
    ),
    _dimension(
        "gender", "tb_sexo",
        "id, sexo as name, created_at, created_at as updated_at",
        watermark_column="created_at",
    ),
    _dimension(
        "civil_status", "tb_estado_civil",
        "id, estado_civil as name, created_at, created_at as updated_at",
        watermark_column="created_at",
    ),
    _dimension(
        "education_level", "tb_escolaridade",
        "id, nivel as name, null as created_at, null as updated_at",
    ),
    _dimension(
        "course", "tb_confcurso",
        "co_seq_confcurso as id, no_curso as name, "
        "dt_publicado as created_at, dt_publicado as updated_at",
        watermark_column="dt_publicado",
    ),
    _dimension(
        "educational_institution", "tb_confinstituicao",
        "co_seq_confinstituicao as id, no_instituicao as name, "
        "dt_publicado as created_at, dt_publicado as updated_at",
        watermark_column="dt_publicado",
    ),
    _dimension(
        "semester", "tb_semestre",
        "id, semestre as name, null as created_at, null as updated_at",
    ),
    _dimension(
        "shift", "tb_turno",
        "id, turno as name, created_at, created_at as updated_at",
        watermark_column="created_at",
    ),
    Job(
        key="user",
        tier=1,
        source_table="tb_usuario",
        pk="co_seq_usuario",
        row_schema=UserRow,
        upsert=upsert_user,
        watermark_column="updated_at",
    ),
]
