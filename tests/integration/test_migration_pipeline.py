"""
End-to-end migration runs against SQLite source and target databases
"""

import pytest
from dataclasses import replace
from datetime import date
from sqlalchemy import func, select, update

from migrator.jobs.reference import upsert_state
from models.base import ErrorStage, RunMode, RunStatus
from models.destination import state, student, user
from models.migration_error import MigrationError
from models.migration_map import MigrationMapping
from models.migration_run import MigrationRun
from tests.legacy import (
    insert_rows, jobs_by_key, tb_estados, tb_estudante, tb_usuario
)


async def count(session, table):
    result = await session.execute(select(func.count()).select_from(table))
    return result.scalar()


async def mappings(session, entity):
    result = await session.execute(
        select(MigrationMapping.legacy_id, MigrationMapping.new_id)
        .where(MigrationMapping.entity == entity)
        .order_by(MigrationMapping.legacy_id)
    )
    return dict(result.all())


@pytest.mark.asyncio
async def test_state_job_creates_rows_and_mappings(source_engine, make_engine, db_session, legacy_states):
    """Two legacy states produce two destination rows and two mappings"""
    await insert_rows(source_engine, tb_estados, legacy_states)
    engine = make_engine(jobs_by_key("state"))

    results = await engine.run(mode=RunMode.FULL)

    assert len(results) == 1
    assert results[0].status == RunStatus.SUCCESS
    assert results[0].counters.read == 2
    assert results[0].counters.inserted == 2

    assert await count(db_session, state) == 2
    mapped = await mappings(db_session, "state")
    assert set(mapped) == {"1", "2"}

    rows = (await db_session.execute(select(state.c.id, state.c.name, state.c.acronym))).all()
    by_id = {row.id: row for row in rows}
    assert by_id[mapped["1"]].name == "São Paulo"
    assert by_id[mapped["1"]].acronym == "SP"
    assert by_id[mapped["2"]].name == "Rio de Janeiro"
    assert by_id[mapped["2"]].acronym == "RJ"


@pytest.mark.asyncio
async def test_rerun_is_stable(source_engine, make_engine, db_session, legacy_states):
    """Second run over the same snapshot keeps row count and ids"""
    await insert_rows(source_engine, tb_estados, legacy_states)
    engine = make_engine(jobs_by_key("state"))

    await engine.run(mode=RunMode.FULL)
    first = await mappings(db_session, "state")

    results = await engine.run(mode=RunMode.FULL)

    assert results[0].counters.updated == 2
    assert results[0].counters.inserted == 0
    assert await count(db_session, state) == 2
    assert await mappings(db_session, "state") == first


@pytest.mark.asyncio
async def test_dependent_row_resolves_state_reference(
    source_engine, make_engine, db_session, legacy_states, legacy_users
):
    """A student referencing legacy state 1 points at the state migrated from it"""
    await insert_rows(source_engine, tb_estados, legacy_states)
    await insert_rows(source_engine, tb_usuario, legacy_users)
    await insert_rows(source_engine, tb_estudante, [{
        "id": 100,
        "usuario_id": 10,
        "nome_completo": "Maria Silva",
        "data_nascimento": date(2001, 3, 4),
        "rg": "123",
        "estado_id": 1,
        "possui_cnh": False,
    }])
    engine = make_engine(jobs_by_key("state", "user", "student"))

    results = await engine.run(mode=RunMode.FULL)

    assert [r.status for r in results] == [RunStatus.SUCCESS] * 3
    state_x = (await mappings(db_session, "state"))["1"]
    student_row = (await db_session.execute(select(student))).one()
    assert student_row.state_id == state_x
    assert student_row.user_id == (await mappings(db_session, "user"))["10"]


@pytest.mark.asyncio
async def test_user_is_mapped_under_both_legacy_keys(source_engine, make_engine, db_session, legacy_users):
    await insert_rows(source_engine, tb_usuario, legacy_users)
    engine = make_engine(jobs_by_key("user"))

    await engine.run(mode=RunMode.FULL)

    mapped = await mappings(db_session, "user")
    assert mapped["10"] == mapped["8f14e45f-ceea-4e7a-a6d1-1c6e2a5b0a01"]
    assert mapped["11"] == mapped["8f14e45f-ceea-4e7a-a6d1-1c6e2a5b0a02"]
    assert mapped["10"] != mapped["11"]

    emails = (await db_session.execute(select(user.c.email).order_by(user.c.email))).scalars().all()
    assert emails == ["contato@acme.com.br", "maria@example.com"]


@pytest.mark.asyncio
async def test_rerun_updates_changed_user_email(source_engine, make_engine, db_session, legacy_users):
    await insert_rows(source_engine, tb_usuario, legacy_users)
    engine = make_engine(jobs_by_key("user"))
    await engine.run(mode=RunMode.FULL)
    user_id = (await mappings(db_session, "user"))["10"]

    async with source_engine.begin() as conn:
        await conn.execute(
            update(tb_usuario)
            .where(tb_usuario.c.co_seq_usuario == 10)
            .values(email="maria.silva@example.com")
        )
    results = await engine.run(mode=RunMode.FULL)

    assert results[0].counters.failed == 0
    assert results[0].counters.updated == 2
    assert (await mappings(db_session, "user"))["10"] == user_id
    email = (await db_session.execute(
        select(user.c.email).where(user.c.id == user_id)
    )).scalar_one()
    assert email == "maria.silva@example.com"
    assert await count(db_session, user) == 2


@pytest.mark.asyncio
async def test_missing_dependency_is_skipped(source_engine, make_engine, db_session):
    """A student whose user was never migrated writes nothing and one validate error"""
    await insert_rows(source_engine, tb_estudante, [{
        "id": 200,
        "usuario_id": 999,
        "nome_completo": "Sem Usuario",
        "rg": "1",
    }])
    engine = make_engine(jobs_by_key("student"))

    results = await engine.run(mode=RunMode.FULL)

    assert results[0].status == RunStatus.SUCCESS
    assert results[0].counters.failed == 1
    assert await count(db_session, student) == 0
    assert await mappings(db_session, "student") == {}

    errors = (await db_session.execute(select(MigrationError))).scalars().all()
    assert len(errors) == 1
    assert errors[0].stage == ErrorStage.VALIDATE.value
    assert errors[0].legacy_id == "200"
    assert errors[0].run_id == results[0].run_id
    assert "user=999" in errors[0].error_message


@pytest.mark.asyncio
async def test_row_failure_is_isolated(source_engine, make_engine, db_session):
    """A throwing row is logged as a load error and later rows still migrate"""
    await insert_rows(source_engine, tb_estados, [
        {"id": 1, "estado": "São Paulo", "uf": "SP"},
        {"id": 2, "estado": "Rio de Janeiro", "uf": "RJ"},
        {"id": 3, "estado": "Minas Gerais", "uf": "MG"},
    ])

    async def flaky_upsert(row, ctx):
        if row.id == 2:
            raise RuntimeError("boom")
        return await upsert_state(row, ctx)

    job = replace(jobs_by_key("state")[0], upsert=flaky_upsert)
    results = await make_engine([job]).run(mode=RunMode.FULL)

    assert results[0].status == RunStatus.SUCCESS
    assert results[0].counters.read == 3
    assert results[0].counters.inserted == 2
    assert results[0].counters.failed == 1

    errors = (await db_session.execute(select(MigrationError))).scalars().all()
    assert len(errors) == 1
    assert errors[0].stage == ErrorStage.LOAD.value
    assert errors[0].legacy_id == "2"
    assert errors[0].error_message == "boom"
    assert errors[0].payload["name"] == "Rio de Janeiro"

    assert set(await mappings(db_session, "state")) == {"1", "3"}


@pytest.mark.asyncio
async def test_invalid_row_is_a_transform_error(source_engine, make_engine, db_session):
    await insert_rows(source_engine, tb_estados, [
        {"id": 1, "estado": "São Paulo", "uf": "SPX"},
        {"id": 2, "estado": "Rio de Janeiro", "uf": "RJ"},
    ])

    results = await make_engine(jobs_by_key("state")).run(mode=RunMode.FULL)

    assert results[0].counters.failed == 1
    assert results[0].counters.inserted == 1
    error = (await db_session.execute(select(MigrationError))).scalar_one()
    assert error.stage == ErrorStage.TRANSFORM.value
    assert "acronym" in error.error_message


@pytest.mark.asyncio
async def test_extraction_failure_fails_only_that_job(source_engine, make_engine, db_session, legacy_states):
    """A job whose source query fails is marked failed and the next job still runs"""
    await insert_rows(source_engine, tb_estados, legacy_states)
    broken = replace(jobs_by_key("state")[0], key="broken", source_table="tb_does_not_exist")

    results = await make_engine([broken, *jobs_by_key("state")]).run(mode=RunMode.FULL)

    assert [r.job for r in results] == ["broken", "state"]
    assert results[0].status == RunStatus.FAILED
    assert results[0].error_message
    assert results[1].status == RunStatus.SUCCESS

    runs = (await db_session.execute(select(MigrationRun).order_by(MigrationRun.id))).scalars().all()
    assert [(r.job_name, r.status) for r in runs] == [("broken", "failed"), ("state", "success")]
    assert runs[0].finished_at is not None
    assert "tb_does_not_exist" in runs[0].error_message

    error = (await db_session.execute(select(MigrationError))).scalar_one()
    assert error.stage == ErrorStage.EXTRACT.value
    assert error.legacy_id is None


@pytest.mark.asyncio
async def test_job_filter_runs_single_job(source_engine, make_engine, db_session, legacy_states, legacy_users):
    await insert_rows(source_engine, tb_estados, legacy_states)
    await insert_rows(source_engine, tb_usuario, legacy_users)

    results = await make_engine(jobs_by_key("state", "user")).run(job_filter="user")

    assert [r.job for r in results] == ["user"]
    assert await count(db_session, state) == 0
    assert await count(db_session, user) == 2


@pytest.mark.asyncio
async def test_every_run_reaches_a_terminal_status(source_engine, make_engine, db_session, legacy_states):
    await insert_rows(source_engine, tb_estados, legacy_states)

    await make_engine().run(mode=RunMode.FULL)

    runs = (await db_session.execute(select(MigrationRun))).scalars().all()
    assert len(runs) == len(make_engine().jobs)
    assert all(r.status in ("success", "failed") for r in runs)
    assert all(r.finished_at is not None for r in runs)
