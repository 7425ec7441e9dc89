"""
Core utilities and configuration for the legacy migrator.

This package provides foundational components used throughout the engine:

Modules:
    config: Application configuration and environment variable management
    database: Async engine and session factories for source and target stores
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import create_engine, create_session_factory
    from core.exceptions import ExtractionError, ConfigurationError
    from core.logging import setup_logging

Example:
    setup_logging()
    settings.require_databases()

    target = create_engine(settings.TARGET_DATABASE_URL)
    session_factory = create_session_factory(target)
    async with session_factory() as session:
        pass
"""

__all__ = [
    "settings",
    "create_engine",
    "create_session_factory",
    "get_session",
    "setup_logging",
    # Exceptions
    "MigrationException",
    "ConfigurationError",
    "ExtractionError",
    "TransformationError",
    "RowValidationError",
    "LoadError",
    "UpsertError",
    "IdentityMapError",
    "LedgerError",
    "CheckpointError",
]
