"""
app/schemas/health.py

Response schemas for the liveness endpoint.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AgeBucketResponse(BaseModel):
    label: str
    count: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)


class ImportStatusResponse(BaseModel):
    """
    Snapshot of the one-shot startup import.
    """

    status: str
    csv_path: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    rows_parsed: int | None = Field(default=None, ge=0)
    rows_inserted: int | None = Field(default=None, ge=0)
    rows_failed: int | None = Field(default=None, ge=0)
    error: str | None = None
    age_distribution: list[AgeBucketResponse] | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    importer: ImportStatusResponse
