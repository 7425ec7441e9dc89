"""
Pydantic schemas for data validation and serialization.

Schemas:
    legacy: One row schema per legacy source table, validated at the
        extraction boundary before a job's upsert sees the row
    api: Status API response models

Features:
    - Type coercion of loosely typed legacy columns
    - Null-byte stripping on every string field
    - Aliases mapping camelCase legacy columns to snake_case attributes
    - OpenAPI schema generation for FastAPI

Usage:
    from schemas.legacy import StateRow, UserRow
    from schemas.api import RunInfo, HealthCheckResponse

Example:
    row = StateRow.model_validate({"id": 1, "name": "São Paulo", "acronym": "sp"})
    assert row.acronym == "SP"
"""

__all__ = [
    "StateRow",
    "UserRow",
    "StudentRow",
    "RunInfo",
    "ErrorInfo",
    "CheckpointInfo",
    "HealthCheckResponse",
]
