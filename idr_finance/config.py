"""
Centralized configuration for the IDR finance data aggregator.
All settings come from environment variables for 12-factor deployment.
"""

import os

from idr_finance.core.constants import (
    DEFAULT_LOAD_TIMEOUT_SECONDS,
    FRANKFURTER_DEFAULT_BASE_URL,
    IDR_CURRENCY,
    MAX_RESPONSE_BYTES,
    USD_CURRENCY,
)


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Upstream provider
# ---------------------------------------------------------------------------
FRANKFURTER_BASE_URL = os.environ.get("FRANKFURTER_BASE_URL", FRANKFURTER_DEFAULT_BASE_URL).rstrip("/")
FRANKFURTER_CONNECT_TIMEOUT_SECONDS = float(os.environ.get("FRANKFURTER_CONNECT_TIMEOUT_SECONDS", "5"))
FRANKFURTER_READ_TIMEOUT_SECONDS = float(os.environ.get("FRANKFURTER_READ_TIMEOUT_SECONDS", "10"))
FRANKFURTER_MAX_RESPONSE_BYTES = int(
    os.environ.get("FRANKFURTER_MAX_RESPONSE_BYTES", str(MAX_RESPONSE_BYTES))
)

# ---------------------------------------------------------------------------
# Historical range (historical_idr_usd)
# ---------------------------------------------------------------------------
HISTORICAL_START_DATE = os.environ.get("HISTORICAL_START_DATE", "2024-01-01")
HISTORICAL_END_DATE = os.environ.get("HISTORICAL_END_DATE", "2024-01-05")
HISTORICAL_FROM_CURRENCY = os.environ.get("HISTORICAL_FROM_CURRENCY", IDR_CURRENCY)
HISTORICAL_TO_CURRENCY = os.environ.get("HISTORICAL_TO_CURRENCY", USD_CURRENCY)

# ---------------------------------------------------------------------------
# Spread enrichment. The seed is constant for the process lifetime.
# ---------------------------------------------------------------------------
GITHUB_USERNAME = os.environ.get("GITHUB_USERNAME", "").strip()

# ---------------------------------------------------------------------------
# Startup loader
# ---------------------------------------------------------------------------
DATA_LOAD_TIMEOUT_SECONDS = float(
    os.environ.get("DATA_LOAD_TIMEOUT_SECONDS", str(DEFAULT_LOAD_TIMEOUT_SECONDS))
)

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
PORT = int(os.environ.get("PORT", "8080"))
RELOAD = _env_bool("RELOAD", False)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
