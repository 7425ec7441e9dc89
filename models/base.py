from sqlalchemy import BigInteger, Integer, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import JSONB
import enum

Base = declarative_base()

# bigserial on PostgreSQL, INTEGER PRIMARY KEY (rowid alias) on SQLite
BigIntegerPK = BigInteger().with_variant(Integer(), "sqlite")
JSONPayload = JSON().with_variant(JSONB(), "postgresql")


# ============================================================================
# ENUMS
# ============================================================================

class RunMode(str, enum.Enum):
    """Migration run mode"""
    FULL = "full"
    INCREMENTAL = "incremental"


class RunStatus(str, enum.Enum):
    """Migration run status"""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class ErrorStage(str, enum.Enum):
    """Pipeline stage where a row failed"""
    EXTRACT = "extract"
    TRANSFORM = "transform"
    LOAD = "load"
    VALIDATE = "validate"


def check_in(column: str, enum_cls) -> str:
    """SQL CHECK expression restricting a text column to an enum's values"""
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} in ({values})"
