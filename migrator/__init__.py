"""
Legacy-to-new-schema migration engine.

Modules:
    identity_map: Persistent legacy key -> canonical id bijection per entity
    ledger: One run row per job execution with its terminal status
    checkpoint: Per-job watermark for incremental runs
    error_sink: Append-only log of failed and skipped rows
    job: Job definition, upsert Outcome and shared MigrationContext
    runner: Tier-ordered orchestration loop with per-row fault isolation
    engine: MigrationEngine owning the source/target engines and the registry
    scheduler: APScheduler wrapper for recurring incremental runs

Subpackages:
    jobs: One job per legacy table, registered in `migrator.jobs.JOBS`
    transformers: Field normalization helpers used by the jobs

Architecture:
    Jobs run in ascending dependency tier. For each source row the job's
    upsert resolves foreign keys through the identity map, writes the
    destination row and commits the row's own mapping in one transaction.
    Rows that cannot be written are recorded in migration_errors and the
    job continues; jobs whose extraction fails are marked failed in
    migration_runs and the run continues with the next job.

Usage:
    from migrator.engine import MigrationEngine
    from migrator.jobs import JOBS

    engine = MigrationEngine.from_settings(JOBS)
    results = await engine.run(mode=RunMode.INCREMENTAL)
"""

__all__ = [
    "IdentityMap",
    "RunLedger",
    "CheckpointStore",
    "ErrorSink",
    "Job",
    "Outcome",
    "MigrationContext",
    "MigrationRunner",
    "MigrationEngine",
]
