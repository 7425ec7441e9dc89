"""migration engine control tables

Revision ID: 0001_control_tables
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_control_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "migration_runs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("job_name", sa.Text(), nullable=False),
        sa.Column("mode", sa.Text(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="running"),
        sa.Column("rows_read", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rows_inserted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rows_updated", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rows_failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.CheckConstraint("mode IN ('full', 'incremental')", name="migration_runs_mode_check"),
        sa.CheckConstraint(
            "status IN ('running', 'success', 'failed')", name="migration_runs_status_check"
        ),
    )
    op.create_index("idx_migration_runs_job_started", "migration_runs", ["job_name", "started_at"])

    op.create_table(
        "migration_checkpoints",
        sa.Column("job_name", sa.Text(), primary_key=True),
        sa.Column("last_legacy_id", sa.Text(), nullable=True),
        sa.Column("last_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "migration_map",
        sa.Column("entity", sa.Text(), primary_key=True),
        sa.Column("legacy_id", sa.Text(), primary_key=True),
        sa.Column("new_id", sa.Text(), nullable=False),
        sa.Column("source_hash", sa.Text(), nullable=True),
        sa.Column("migrated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_migration_map_entity_new_id", "migration_map", ["entity", "new_id"])

    op.create_table(
        "migration_errors",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "run_id",
            sa.BigInteger(),
            sa.ForeignKey("migration_runs.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("job_name", sa.Text(), nullable=False),
        sa.Column("legacy_id", sa.Text(), nullable=True),
        sa.Column("stage", sa.Text(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "stage IN ('extract', 'transform', 'load', 'validate')",
            name="migration_errors_stage_check"
        ),
    )
    op.create_index("idx_migration_errors_run_id", "migration_errors", ["run_id"])
    op.create_index("idx_migration_errors_job_name", "migration_errors", ["job_name"])


def downgrade():
    op.drop_index("idx_migration_errors_job_name", table_name="migration_errors")
    op.drop_index("idx_migration_errors_run_id", table_name="migration_errors")
    op.drop_table("migration_errors")
    op.drop_index("idx_migration_map_entity_new_id", table_name="migration_map")
    op.drop_table("migration_map")
    op.drop_table("migration_checkpoints")
    op.drop_index("idx_migration_runs_job_started", table_name="migration_runs")
    op.drop_table("migration_runs")
