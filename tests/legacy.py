"""
Legacy tables used by the tests (subset of the MySQL schema) and helpers to
fill them
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, Integer, MetaData, Table, Text, insert
)
from sqlalchemy.ext.asyncio import AsyncEngine
from typing import Dict, List

from migrator.jobs import JOBS

legacy_metadata = MetaData()

tb_estados = Table(
    "tb_estados", legacy_metadata,
    Column("id", Integer, primary_key=True),
    Column("estado", Text),
    Column("uf", Text),
)

tb_sexo = Table(
    "tb_sexo", legacy_metadata,
    Column("id", Integer, primary_key=True),
    Column("sexo", Text),
    Column("created_at", DateTime),
)

tb_semestre = Table(
    "tb_semestre", legacy_metadata,
    Column("id", Integer, primary_key=True),
    Column("semestre", Text),
)

tb_usuario = Table(
    "tb_usuario", legacy_metadata,
    Column("co_seq_usuario", Integer, primary_key=True),
    Column("id", Text),
    Column("name", Text),
    Column("ds_login", Text),
    Column("email", Text),
    Column("password_hash", Text),
    Column("role", Text),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

tb_empresa = Table(
    "tb_empresa", legacy_metadata,
    Column("co_seq_empresa", Integer, primary_key=True),
    Column("id", Text),
    Column("user_id", Integer),
    Column("ds_razao_social", Text),
    Column("nu_cnpj", Text),
    Column("ds_uf", Text),
    Column("nu_cep", Text),
    Column("nu_telefone", Text),
    Column("ds_obs_futura_emp", Text),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

tb_estudante = Table(
    "tb_estudante", legacy_metadata,
    Column("id", Integer, primary_key=True),
    Column("usuario_id", Integer),
    Column("nome_completo", Text),
    Column("data_nascimento", Date),
    Column("rg", Text),
    Column("genero", Text),
    Column("estado_id", Integer),
    Column("semestre_id", Integer),
    Column("possui_cnh", Boolean),
    Column("createdAt", DateTime),
    Column("updatedAt", DateTime),
)


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def insert_rows(engine: AsyncEngine, table: Table, rows: List[Dict]) -> None:
    """Insert legacy rows into the source database"""
    async with engine.begin() as conn:
        await conn.execute(insert(table), rows)


def jobs_by_key(*keys: str) -> list:
    registry = {job.key: job for job in JOBS}
    return [registry[key] for key in keys]
