from sqlalchemy import Column, BigInteger, CheckConstraint, DateTime, ForeignKey, Text, Index, func
from models.base import Base, BigIntegerPK, JSONPayload, ErrorStage, check_in


class MigrationError(Base):
    """
    Append-only log of failed or skipped source rows.

    Purpose:
    - Operator review of everything a run did not write
    - Replay: payload keeps the raw source row
    """
    __tablename__ = "migration_errors"

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    run_id = Column(
        BigInteger,
        ForeignKey("migration_runs.id", ondelete="SET NULL"),
        nullable=True
    )
    job_name = Column(Text, nullable=False)
    legacy_id = Column(Text, nullable=True)
    stage = Column(Text, nullable=False)
    error_message = Column(Text, nullable=False)
    payload = Column(JSONPayload, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(check_in("stage", ErrorStage), name="migration_errors_stage_check"),
        Index("idx_migration_errors_run_id", "run_id"),
        Index("idx_migration_errors_job_name", "job_name"),
    )
