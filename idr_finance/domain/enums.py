"""
idr_finance.domain.enums — All enumerations used across the service.

Keep this module import-clean (stdlib only).
"""

from enum import Enum
from typing import List


# ---------------------------------------------------------------------------
# Resource types (closed set, one per fetch strategy)
# ---------------------------------------------------------------------------

class ResourceType(str, Enum):
    """Identifier of one aggregated dataset; also the public URL segment."""
    LATEST_IDR_RATES     = "latest_idr_rates"
    HISTORICAL_IDR_USD   = "historical_idr_usd"
    SUPPORTED_CURRENCIES = "supported_currencies"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, raw: str) -> "ResourceType | None":
        """Return the member for ``raw`` or None when it is not recognised."""
        try:
            return cls(raw)
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Startup loader lifecycle
# ---------------------------------------------------------------------------

class LoaderState(str, Enum):
    """NOT_STARTED → RUNNING → COMPLETED, each transition happens once."""
    NOT_STARTED = "not_started"
    RUNNING     = "running"
    COMPLETED   = "completed"
