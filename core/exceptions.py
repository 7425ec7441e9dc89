"""
Custom exceptions for the migration engine with structured error context.

Each exception carries a context dictionary so that failures can be logged
and written to the error sink with enough information to diagnose them.

Exception Hierarchy:
    MigrationException (base)
    ├── ConfigurationError
    ├── ExtractionError
    ├── TransformationError
    │   └── RowValidationError
    ├── LoadError
    │   ├── UpsertError
    │   └── IdentityMapError
    ├── LedgerError
    └── CheckpointError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class MigrationException(Exception):
    """
    Base exception for all migration-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (job, legacy id, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(MigrationException):
    """
    Raised before any store is touched when required settings are absent.

    Context should include:
        - missing: Names of the settings that were not provided
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(MigrationException):
    """
    Raised when a job's source query fails.

    Context should include:
        - job_name: Key of the job whose extraction failed
        - source_table: Legacy table being read
        - mode: Run mode (full / incremental)
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(MigrationException):
    """Base exception for row transformation failures."""
    pass


class RowValidationError(TransformationError):
    """
    Raised when a source row does not match its job's row schema.

    Context should include:
        - job_name: Key of the job
        - legacy_id: Primary key value of the offending row
        - field_errors: Pydantic error list
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(MigrationException):
    """Base exception for target write failures."""
    pass


class UpsertError(LoadError):
    """
    Raised when a destination upsert cannot be built or executed.

    Context should include:
        - table_name: Destination table
        - conflict_fields: Conflict target of the upsert
    """
    pass


class IdentityMapError(LoadError):
    """
    Raised when an identity mapping cannot be committed.

    Context should include:
        - entity: Mapping namespace
        - legacy_id: Legacy key being mapped
    """
    pass


# ============================================================================
# Bookkeeping Errors
# ============================================================================

class LedgerError(MigrationException):
    """
    Raised on illegal run transitions (finishing an unknown or terminal run).

    Context should include:
        - run_id: Identifier of the migration run
        - status: Current status of the run (if known)
    """
    pass


class CheckpointError(MigrationException):
    """
    Raised when checkpoint management fails.

    Context should include:
        - job_name: Job whose checkpoint failed
        - operation: Operation that failed (read, write)
    """
    pass
