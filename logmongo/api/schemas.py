"""
Pydantic schemas for API responses.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    target_configured: bool
    pending_writes: int
    timestamp: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: Optional[str] = None
    code: str


class LogListResponse(BaseModel):
    """Stored request records."""
    records: List[Dict[str, Any]] = Field(default_factory=list)
    count: int
    limit: int
    skip: int
