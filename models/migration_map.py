from sqlalchemy import Column, DateTime, Text, Index, func
from models.base import Base


class MigrationMapping(Base):
    """
    Identity map between legacy keys and canonical new ids.

    Design:
    - (entity, legacy_id) is the primary key: a legacy key maps to exactly one new id
    - entity is a namespace tag, one per destination table family
    - A new id may be registered under both the integer sequence key and the
      UUID key of the same legacy record, so (entity, new_id) is indexed but
      not unique
    - Rows are upserted (migrated_at refreshed) and never deleted
    """
    __tablename__ = "migration_map"

    entity = Column(Text, primary_key=True)
    legacy_id = Column(Text, primary_key=True)
    new_id = Column(Text, nullable=False)
    source_hash = Column(Text, nullable=True)  # SHA-256 of the source row at last commit
    migrated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_migration_map_entity_new_id", "entity", "new_id"),
    )
