"""
Pydantic schemas for the status API responses
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Any
from datetime import datetime


# ============================================================================
# Run Ledger Schemas
# ============================================================================

class RunInfo(BaseModel):
    """One migration_runs row"""
    id: int
    job_name: str
    mode: str
    status: str
    started_at: Optional[datetime]
    finished_at: Optional[datetime] = None
    rows_read: int = 0
    rows_inserted: int = 0
    rows_updated: int = 0
    rows_failed: int = 0
    error_message: Optional[str] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 42,
                "job_name": "state",
                "mode": "full",
                "status": "success",
                "started_at": "2026-01-15T10:00:00Z",
                "finished_at": "2026-01-15T10:00:03Z",
                "rows_read": 27,
                "rows_inserted": 27,
                "rows_updated": 0,
                "rows_failed": 0,
                "error_message": None
            }
        }
    )


class RunListResponse(BaseModel):
    """Recent runs, newest first"""
    items: List[RunInfo]
    count: int
    filters_applied: dict = Field(default_factory=dict)


# ============================================================================
# Error Sink Schemas
# ============================================================================

class ErrorInfo(BaseModel):
    """One migration_errors row"""
    id: int
    run_id: Optional[int]
    job_name: str
    legacy_id: Optional[str]
    stage: str
    error_message: str
    payload: Optional[Any] = None
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class PaginationMetadata(BaseModel):
    """Pagination metadata"""
    total_items: int
    total_pages: int
    current_page: int
    page_size: int
    has_next: bool
    has_previous: bool


class ErrorListResponse(BaseModel):
    """Paginated error-sink entries of one run"""
    run_id: int
    items: List[ErrorInfo]
    pagination: PaginationMetadata


# ============================================================================
# Checkpoint Schemas
# ============================================================================

class CheckpointInfo(BaseModel):
    """One migration_checkpoints row"""
    job_name: str
    last_legacy_id: Optional[str]
    last_updated_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Health Check Schemas
# ============================================================================

class JobHealth(BaseModel):
    """Latest run of a job"""
    job_name: str
    status: str
    run_id: int
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    rows_failed: int = 0


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    jobs: List[JobHealth] = Field(default_factory=list)
    total_jobs: int = 0
    failed_jobs: int = 0

    @model_validator(mode="after")
    def determine_status(self):
        """Determine overall health status"""
        if not self.database_connected:
            self.status = "unhealthy"
        elif self.total_jobs == 0 or self.failed_jobs == 0:
            self.status = "healthy"
        elif self.failed_jobs < self.total_jobs:
            self.status = "degraded"
        else:
            self.status = "unhealthy"
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "degraded",
                "timestamp": "2026-01-15T10:30:00Z",
                "database_connected": True,
                "total_jobs": 2,
                "failed_jobs": 1,
                "jobs": [
                    {
                        "job_name": "state",
                        "status": "success",
                        "run_id": 41,
                        "started_at": "2026-01-15T10:00:00Z",
                        "finished_at": "2026-01-15T10:00:03Z",
                        "rows_failed": 0
                    }
                ]
            }
        }
    )


# ============================================================================
# Error Response Schema
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
