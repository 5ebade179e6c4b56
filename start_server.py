"""Startup script for container deployment.

    GITHUB_USERNAME=<your GitHub username> python start_server.py

GITHUB_USERNAME is required: it seeds the USD_BuySpread_IDR enrichment and the
server refuses to start without it.  Everything else has a default; see
``idr_finance.config`` (PORT, LOG_LEVEL, FRANKFURTER_BASE_URL, HISTORICAL_*,
DATA_LOAD_TIMEOUT_SECONDS).
"""
import uvicorn

from idr_finance import config

if __name__ == "__main__":
    print(f"Starting uvicorn on port {config.PORT}", flush=True)
    uvicorn.run(
        "idr_finance.app:app",
        host="0.0.0.0",
        port=config.PORT,
        log_level="info",
    )
