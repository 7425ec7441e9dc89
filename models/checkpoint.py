from sqlalchemy import Column, DateTime, Text, func
from models.base import Base


class MigrationCheckpoint(Base):
    """
    Resumability watermark per job.

    Purpose:
    - Let incremental runs read only source rows changed since the last clean run
    - Record the last legacy key processed for operator inspection

    Design:
    - One row per job, keyed by job name
    - last_updated_at holds the largest watermark column value seen
    """
    __tablename__ = "migration_checkpoints"

    job_name = Column(Text, primary_key=True)
    last_legacy_id = Column(Text, nullable=True)
    last_updated_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
