"""
Unit tests for job definitions and upsert outcomes
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from migrator.job import (
    Job, MissingReference, Outcome, OutcomeKind, ReferenceCache, row_hash, sort_jobs
)
from migrator.jobs import JOBS
from models.base import RunMode
from schemas.legacy import DimensionRow


def make_job(key="gender", tier=1, **kwargs):
    defaults = dict(
        source_table="tb_sexo",
        pk="id",
        row_schema=DimensionRow,
        upsert=AsyncMock(),
    )
    defaults.update(kwargs)
    return Job(key=key, tier=tier, **defaults)


class TestExtract:
    """Source query per run mode"""

    def test_full_mode_scans_by_pk(self):
        job = make_job(watermark_column="created_at")

        stmt = job.extract(RunMode.FULL)

        assert str(stmt) == "select * from tb_sexo order by id"

    def test_incremental_filters_on_watermark(self):
        job = make_job(watermark_column="created_at")
        since = datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc)

        stmt = job.extract(RunMode.INCREMENTAL, since)
        compiled = stmt.compile()

        assert str(stmt) == (
            "select * from tb_sexo where (created_at > :since or created_at is null)"
            " order by created_at, id"
        )
        assert compiled.params["since"] == datetime(2024, 1, 2, 8, 0)

    def test_incremental_without_checkpoint_scans_everything(self):
        job = make_job(watermark_column="created_at")

        assert str(job.extract(RunMode.INCREMENTAL, None)) == "select * from tb_sexo order by id"

    def test_incremental_without_watermark_column_scans_everything(self):
        job = make_job(columns="id, sexo as name")
        since = datetime(2024, 1, 2, tzinfo=timezone.utc)

        assert not job.supports_incremental
        assert str(job.extract(RunMode.INCREMENTAL, since)) == (
            "select id, sexo as name from tb_sexo order by id"
        )


class TestRowAccessors:
    def test_legacy_id_is_string(self):
        job = make_job(pk="co_seq_usuario")

        assert job.legacy_id({"co_seq_usuario": 10}) == "10"
        assert job.legacy_id({}) is None

    def test_watermark_uses_aliased_field(self):
        job = make_job(watermark_column="dt_publicado", watermark_field="updated_at")

        assert job.watermark({"updated_at": datetime(2024, 1, 1)}) == datetime(2024, 1, 1)
        assert job.watermark({"updated_at": "2024-01-01 10:00:00.000000"}) == datetime(2024, 1, 1, 10)
        assert job.watermark({"updated_at": "garbage"}) is None
        assert job.watermark({"dt_publicado": datetime(2024, 1, 1)}) is None

    def test_row_hash_is_stable(self):
        assert row_hash({"a": 1, "b": "x"}) == row_hash({"b": "x", "a": 1})
        assert row_hash({"a": 1}) != row_hash({"a": 2})


class TestOutcome:
    def test_written(self):
        assert Outcome.written("n", existed=False).kind == OutcomeKind.INSERTED
        assert Outcome.written("n", existed=True).kind == OutcomeKind.UPDATED
        assert not Outcome.written("n", existed=True).is_skip

    def test_skip_reason_names_missing_references(self):
        outcome = Outcome.skipped(
            MissingReference("user", "999"),
            MissingReference("state"),
        )

        assert outcome.is_skip
        assert outcome.new_id is None
        assert outcome.reason == (
            "skipped: missing dependency user=999 (not migrated), state (no legacy reference)"
        )


class TestOrdering:
    def test_jobs_sorted_by_tier_keeping_registry_order(self):
        jobs = [make_job("c", 3), make_job("a", 1), make_job("b", 2), make_job("a2", 1)]

        assert [job.key for job in sort_jobs(jobs)] == ["a", "a2", "b", "c"]

    def test_registry_keys_are_unique(self):
        keys = [job.key for job in JOBS]
        assert len(keys) == len(set(keys))

    def test_registry_tiers(self):
        tiers = {job.key: job.tier for job in JOBS}

        assert tiers["state"] == tiers["user"] == 1
        assert tiers["company"] == tiers["student"] == 2
        assert tiers["company_supervisor"] == 3
        assert tiers["internship_commitment_term"] == 4
        assert tiers["signed_internship_commitment_term"] == 5


class TestReferenceCache:
    def test_gender_lookup_uses_aliases(self):
        cache = ReferenceCache(gender_by_name={"masculino": "g-m", "feminino": "g-f"})

        assert cache.gender_id("M") == "g-m"
        assert cache.gender_id("Feminino") == "g-f"
        assert cache.gender_id("x") is None
        assert cache.gender_id(None) is None
