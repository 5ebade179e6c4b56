"""
IDR Finance Data Aggregator - FastAPI Application
Main entry point for the HTTP server.

Run with:
    uvicorn idr_finance.app:app --host 0.0.0.0 --port 8080
"""

import asyncio
import json
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from idr_finance import config
from idr_finance.api.routes import register_routes
from idr_finance.api.schemas import error_response
from idr_finance.core.constants import API_VERSION
from idr_finance.core.logging import bind_context_id, configure_logging, reset_context_id
from idr_finance.data_pipeline.fetcher import FrankfurterClient
from idr_finance.data_pipeline.strategies import build_strategies
from idr_finance.data_store import get_data_store
from idr_finance.errors import FetchFailure, InvalidArgumentError
from idr_finance.loader import DataInitializationRunner
from idr_finance.metrics import record_error

configure_logging()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan (startup / shutdown)
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the one-shot data load, serve while it runs, clean up on exit."""
    client = FrankfurterClient()
    try:
        strategies = build_strategies(client)
    except InvalidArgumentError as exc:
        logger.critical("Startup aborted: %s", exc)
        await client.close()
        raise
    runner = DataInitializationRunner(strategies, get_data_store())
    app.state.loader = runner

    logger.info("Loading %d resources from %s in the background...", len(strategies), client.base_url)
    load_task = asyncio.create_task(runner.run(), name="data-initialization")

    try:
        yield  # Application is running
    finally:
        await runner.stop()
        await asyncio.gather(load_task, return_exceptions=True)
        await client.close()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

app = FastAPI(
    title="IDR Finance Data Aggregator",
    version=API_VERSION,
    description="Serves IDR exchange-rate datasets preloaded from the Frankfurter API",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Exception handlers -- every error leaves as an ApiErrorResponse
# ---------------------------------------------------------------------------

@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    logger.error("Invalid argument on %s: %s", request.url.path, exc)
    return error_response(400, "Invalid Argument", str(exc), request.url.path)


@app.exception_handler(FetchFailure)
async def fetch_failure_handler(request: Request, exc: FetchFailure):
    logger.error("External API error on %s: %s", request.url.path, exc)
    return error_response(
        502,
        "External API Error",
        f"Failed to fetch data from external API: {exc}",
        request.url.path,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    record_error()
    return error_response(
        500,
        "Internal Server Error",
        f"An unexpected error occurred: {exc}",
        request.url.path,
    )


# ---------------------------------------------------------------------------
# Request logging
# ---------------------------------------------------------------------------

@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log one structured line per request and tag the response with X-Request-ID.

    The request id is bound as the logging context id, so every line logged
    while serving the request carries it.
    """
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = bind_context_id(request_id)
    try:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if response.status_code >= 500:
            record_error()

        logger.info(
            "request_log %s",
            json.dumps({
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "elapsed_ms": elapsed_ms,
            }),
        )
    finally:
        reset_context_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

register_routes(app)


# ---------------------------------------------------------------------------
# Development entry-point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "idr_finance.app:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=config.RELOAD,
    )
