"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel
from typing import Optional


class ExportRequest(BaseModel):
    """Schema for an export request."""
    output_path: Optional[str] = None
    include_system_tables: Optional[bool] = None


class ExportResponse(BaseModel):
    """Schema for an export response."""
    message: str
    output_path: str
    schemas: int
    tables: int
    associations: int


class HealthResponse(BaseModel):
    """Schema for the health check."""
    status: str
    database: str
