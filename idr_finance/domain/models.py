"""
idr_finance.domain.models — Canonical dataset models.

Each model mirrors one upstream JSON body.  Models are frozen: a dataset is
built once by its fetch strategy and handed to the data store, after which no
code holds a mutable alias to it.  Enriched copies are made with
``model_copy(update=...)``, never by assignment.

Amounts and rates are held as ``Decimal`` in memory and written to JSON as
plain numbers, the same shape the upstream API sends.

Import pattern::

    from idr_finance.domain.models import LatestRatesResponse
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, RootModel

# Decimal in Python mode, JSON number on the wire.
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class _Dataset(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# latest_idr_rates
# ---------------------------------------------------------------------------

class LatestRatesResponse(_Dataset):
    """Body of ``GET /latest?base=IDR`` plus the enriched buy spread."""

    amount: JsonDecimal
    base: str
    date: dt.date
    rates: Dict[str, JsonDecimal] = Field(default_factory=dict)

    # Added by LatestIdrRatesStrategy; absent in the raw upstream body.
    usd_buy_spread_idr: Optional[JsonDecimal] = Field(default=None, alias="USD_BuySpread_IDR")


# ---------------------------------------------------------------------------
# historical_idr_usd
# ---------------------------------------------------------------------------

class HistoricalRatesResponse(_Dataset):
    """Body of ``GET /{start}..{end}?from=..&to=..``."""

    amount: JsonDecimal
    base: str
    start_date: dt.date
    end_date: dt.date
    rates: Dict[dt.date, Dict[str, JsonDecimal]] = Field(default_factory=dict)



# ---------------------------------------------------------------------------
# supported_currencies
# ---------------------------------------------------------------------------

class CurrenciesResponse(RootModel[Dict[str, str]]):
    """Body of ``GET /currencies``: currency code → display name."""

    model_config = ConfigDict(frozen=True)
