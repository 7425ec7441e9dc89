"""
Pytest configuration and fixtures

Source and target are separate SQLite files (aiosqlite) so every test gets
an isolated legacy database and an isolated target database.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from typing import AsyncGenerator

from core.database import create_engine, create_session_factory
from migrator.engine import MigrationEngine
from migrator.jobs import JOBS
from models import Base
from models.destination import destination_metadata
from tests.legacy import legacy_metadata, sqlite_url


# ============================================================================
# Engines and sessions
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def source_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Legacy database with empty legacy tables"""
    engine = create_engine(sqlite_url(tmp_path / "legacy.db"))

    async with engine.begin() as conn:
        await conn.run_sync(legacy_metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def target_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Target database with control tables and destination tables"""
    engine = create_engine(sqlite_url(tmp_path / "target.db"))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(destination_metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(target_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create target database session for tests"""
    session_maker = create_session_factory(target_engine)

    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_engine(source_engine, target_engine):
    """Build a MigrationEngine over the test databases for a set of jobs"""
    def _make(jobs=None) -> MigrationEngine:
        return MigrationEngine(source_engine, target_engine, JOBS if jobs is None else jobs)
    return _make


# ============================================================================
# Legacy data
# ============================================================================

@pytest.fixture
def legacy_states():
    return [
        {"id": 1, "estado": "São Paulo", "uf": "SP"},
        {"id": 2, "estado": "Rio de Janeiro", "uf": "RJ"},
    ]


@pytest.fixture
def legacy_users():
    return [
        {
            "co_seq_usuario": 10,
            "id": "8f14e45f-ceea-4e7a-a6d1-1c6e2a5b0a01",
            "name": "Maria Silva",
            "ds_login": "maria",
            "email": "Maria@Example.com",
            "password_hash": "hash",
            "role": "student",
        },
        {
            "co_seq_usuario": 11,
            "id": "8f14e45f-ceea-4e7a-a6d1-1c6e2a5b0a02",
            "name": "ACME Ltda",
            "ds_login": "acme",
            "email": "contato@acme.com.br",
            "password_hash": "hash",
            "role": "company",
        },
    ]
