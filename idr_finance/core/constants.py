"""
IDR Finance — System-wide constants.

Every magic number lives here. If you find a literal in the codebase that is
not a local variable, it belongs here instead.
"""

# ---------------------------------------------------------------------------
# Upstream (Frankfurter API)
# ---------------------------------------------------------------------------

FRANKFURTER_DEFAULT_BASE_URL: str = "https://api.frankfurter.app"
USER_AGENT: str = "idr-finance-aggregator/1.0"

# Matches the 16 MiB in-memory codec limit of the upstream client.
MAX_RESPONSE_BYTES: int = 16 * 1024 * 1024

# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------

IDR_CURRENCY: str = "IDR"
USD_CURRENCY: str = "USD"

# ---------------------------------------------------------------------------
# Spread enrichment
# ---------------------------------------------------------------------------

# Spread factor = (sum of code points % SPREAD_MODULUS) / SPREAD_DIVISOR
SPREAD_MODULUS: int = 1000
SPREAD_DIVISOR: int = 100_000
SPREAD_FACTOR_PLACES: int = 5

# Both the inverse rate and the final buy spread are rounded to this scale.
BUY_SPREAD_PLACES: int = 10

# ---------------------------------------------------------------------------
# Startup loader
# ---------------------------------------------------------------------------

DEFAULT_LOAD_TIMEOUT_SECONDS: float = 30.0

# ---------------------------------------------------------------------------
# HTTP surface
# ---------------------------------------------------------------------------

API_VERSION: str = "1.0.0"
FINANCE_DATA_PATH: str = "/api/finance/data"
