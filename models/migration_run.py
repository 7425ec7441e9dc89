from sqlalchemy import Column, CheckConstraint, DateTime, Integer, Text, Index, func
from models.base import Base, BigIntegerPK, RunMode, RunStatus, check_in


class MigrationRun(Base):
    """
    One row per job execution.

    Purpose:
    - Audit trail of every engine invocation, independent of process stdout
    - Row counters for comparing reruns
    - Error message of jobs whose extraction failed

    Lifecycle:
    - Created as `running` when the job starts
    - Transitions exactly once to `success` or `failed`, terminal thereafter
    """
    __tablename__ = "migration_runs"

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    job_name = Column(Text, nullable=False)
    mode = Column(Text, nullable=False)

    started_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    finished_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(Text, nullable=False, server_default=RunStatus.RUNNING.value)

    # Counters
    rows_read = Column(Integer, nullable=False, server_default="0")
    rows_inserted = Column(Integer, nullable=False, server_default="0")
    rows_updated = Column(Integer, nullable=False, server_default="0")
    rows_failed = Column(Integer, nullable=False, server_default="0")

    error_message = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(check_in("mode", RunMode), name="migration_runs_mode_check"),
        CheckConstraint(check_in("status", RunStatus), name="migration_runs_status_check"),
        Index("idx_migration_runs_job_started", "job_name", "started_at"),
    )
