"""
SQLAlchemy models for the engine's control tables and the destination schema.

Models:
    base: Declarative Base for control tables and shared enums (RunMode, RunStatus, ErrorStage)
    migration_run: One row per job execution (run ledger)
    checkpoint: Per-job incremental watermark
    migration_map: Legacy key -> canonical id identity map
    migration_error: Append-only per-row failure log
    destination: Core Table descriptions of the application tables the jobs write

Database Schema:
    Control tables inherit from Base and are owned by the engine; they are
    created by `ensure_control_tables` or the Alembic revision. Destination
    tables live in `destination_metadata` and are never created by the engine.

Usage:
    from models import MigrationRun, MigrationMapping, MigrationError
    from models.base import RunStatus, ErrorStage

Relationships:
    - MigrationRun -> MigrationError (one-to-many, run_id set null on delete)
"""

from models.base import Base, RunMode, RunStatus, ErrorStage
from models.migration_run import MigrationRun
from models.checkpoint import MigrationCheckpoint
from models.migration_map import MigrationMapping
from models.migration_error import MigrationError

__all__ = [
    "Base",
    "RunMode",
    "RunStatus",
    "ErrorStage",
    "MigrationRun",
    "MigrationCheckpoint",
    "MigrationMapping",
    "MigrationError",
]
