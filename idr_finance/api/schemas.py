"""
IDR Finance — API request/response schemas (Pydantic).

Every error leaving the service uses ``ApiErrorResponse`` so clients can rely
on one shape regardless of which layer failed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ApiErrorResponse(BaseModel):
    """Uniform error body."""

    timestamp: datetime = Field(default_factory=datetime.now)
    status: int
    error: str
    message: str
    path: str


class ResourceListingResponse(BaseModel):
    """Diagnostic listing of what the loader stored."""

    ready: bool
    resources: Dict[str, bool] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    ready: bool
    uptime_seconds: float = 0.0
    resources_loaded: int = 0
    load_success_count: int = 0
    load_failure_count: int = 0
    cache_hit_rate: float = 0.0
    last_load_seconds: Optional[float] = None
    errors_last_hour: int = 0


def error_response(status: int, error: str, message: str, path: str) -> JSONResponse:
    """Build a JSONResponse carrying an ``ApiErrorResponse`` body."""
    body = ApiErrorResponse(status=status, error=error, message=message, path=path)
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))
