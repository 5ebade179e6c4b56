"""
IDR Finance — Centralised router registration.

This module is the single place where every APIRouter is mounted onto the
FastAPI application.  Import and call ``register_routes(app)`` once in
``idr_finance.app``.

  GET  /api/finance/data/{resource_type}  — one dataset, wrapped in a list
  GET  /api/finance/data                  — which datasets are loaded
  GET  /api/health                        — health check
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, FastAPI, Request

from idr_finance.api.schemas import HealthResponse, ResourceListingResponse, error_response
from idr_finance.core.constants import API_VERSION, FINANCE_DATA_PATH
from idr_finance.data_store import get_data_store
from idr_finance.domain.enums import ResourceType
from idr_finance.metrics import metrics_snapshot, record_cache_access

logger = logging.getLogger(__name__)

# Module-level start time for uptime reporting
_START_TIME: float = time.time()


# ---------------------------------------------------------------------------
# Finance data
# ---------------------------------------------------------------------------

finance_router = APIRouter(prefix=FINANCE_DATA_PATH, tags=["finance"])


@finance_router.get("/{resource_type}")
async def get_finance_data(resource_type: str, request: Request) -> Any:
    """Serve one preloaded dataset from memory; never calls upstream."""
    logger.debug("Received request for resource type: %s", resource_type)
    path = request.url.path

    parsed = ResourceType.parse(resource_type)
    if parsed is None:
        return error_response(
            400,
            "Invalid Resource Type",
            "Resource type must be one of: " + ", ".join(ResourceType.values()),
            path,
        )

    store = get_data_store()
    if not store.is_ready():
        return error_response(
            503,
            "Data Not Ready",
            "Data is still being loaded. Please try again in a moment.",
            path,
        )

    data = store.read(parsed.value)
    record_cache_access(parsed.value, data is not None)
    if data is None:
        return error_response(
            404,
            "Data Not Found",
            f"No data available for resource type: {parsed.value}",
            path,
        )

    return [data]


@finance_router.get("", response_model=ResourceListingResponse)
async def list_finance_data() -> ResourceListingResponse:
    store = get_data_store()
    loaded = store.snapshot()
    return ResourceListingResponse(
        ready=store.is_ready(),
        resources={rt: rt in loaded for rt in ResourceType.values()},
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

health_router = APIRouter(prefix="/api", tags=["health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    store = get_data_store()
    snap = metrics_snapshot()
    return HealthResponse(
        status="ok" if store.is_ready() else "loading",
        version=API_VERSION,
        ready=store.is_ready(),
        uptime_seconds=round(time.time() - _START_TIME, 1),
        resources_loaded=len(store),
        load_success_count=int(snap["load_success_count"]),
        load_failure_count=int(snap["load_failure_count"]),
        cache_hit_rate=float(snap["cache_hit_rate"]),
        last_load_seconds=snap["last_load_seconds"],
        errors_last_hour=int(snap["errors_last_hour"]),
    )


def register_routes(app: FastAPI) -> None:
    """Mount every router onto ``app``."""
    app.include_router(finance_router)
    app.include_router(health_router)
