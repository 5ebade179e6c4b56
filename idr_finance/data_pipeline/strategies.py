"""
idr_finance.data_pipeline.strategies — One fetch strategy per resource type.

Design: every strategy implements the ``IdrDataFetcher`` ABC with a
``resource_type`` and a single async ``fetch()``.  Strategies only read from
upstream and build their dataset; storing it is the loader's job.

Current implementations:
    LatestIdrRatesStrategy       — /latest?base=IDR, enriched with the USD buy spread
    HistoricalIdrUsdStrategy     — /{start}..{end}?from=IDR&to=USD
    SupportedCurrenciesStrategy  — /currencies

Usage::

    from idr_finance.data_pipeline.strategies import build_strategies
    strategies = build_strategies(client)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from idr_finance import config
from idr_finance.core.constants import IDR_CURRENCY, USD_CURRENCY
from idr_finance.core.spread import spread_factor, usd_buy_spread_idr
from idr_finance.data_pipeline.fetcher import FrankfurterClient
from idr_finance.domain.enums import ResourceType
from idr_finance.domain.models import (
    CurrenciesResponse,
    HistoricalRatesResponse,
    LatestRatesResponse,
)
from idr_finance.errors import FetchFailure, InvalidArgumentError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class IdrDataFetcher(ABC):
    """Fetches and, if needed, transforms exactly one upstream resource."""

    resource_type: str

    def __init__(self, client: FrankfurterClient) -> None:
        self._client = client

    @abstractmethod
    async def fetch(self) -> Any:
        """Return the dataset for ``resource_type``.  Raises on failure, never retries."""

    def _decode(self, model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise FetchFailure(
                f"Unexpected response shape for {self.resource_type}: {exc.error_count()} error(s)",
                resource_type=self.resource_type,
            ) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(resource_type={self.resource_type!r})"


# ---------------------------------------------------------------------------
# latest_idr_rates
# ---------------------------------------------------------------------------

class LatestIdrRatesStrategy(IdrDataFetcher):
    """Latest IDR-based rates plus ``USD_BuySpread_IDR``.

    The spread factor is derived from the seed once, here, so a missing seed
    fails at startup instead of on every fetch.
    """

    resource_type = ResourceType.LATEST_IDR_RATES.value

    def __init__(self, client: FrankfurterClient, seed: Optional[str]) -> None:
        super().__init__(client)
        self.spread_factor: Decimal = spread_factor(seed)

    async def fetch(self) -> LatestRatesResponse:
        logger.info("Fetching latest IDR rates from Frankfurter API")
        payload = await self._client.get_json(
            "/latest", params={"base": IDR_CURRENCY}, resource_type=self.resource_type
        )
        return self.enrich(self._decode(LatestRatesResponse, payload))

    def enrich(self, response: LatestRatesResponse) -> LatestRatesResponse:
        usd_rate = response.rates.get(USD_CURRENCY)
        if usd_rate is None:
            raise FetchFailure("USD rate not found in response", resource_type=self.resource_type)

        buy_spread = usd_buy_spread_idr(usd_rate, self.spread_factor)
        logger.debug(
            "Calculated spread factor: %s, USD_BuySpread_IDR: %s",
            self.spread_factor, buy_spread,
        )
        return response.model_copy(update={"usd_buy_spread_idr": buy_spread})


# ---------------------------------------------------------------------------
# historical_idr_usd
# ---------------------------------------------------------------------------

class HistoricalIdrUsdStrategy(IdrDataFetcher):
    """Time series of IDR → USD over the configured date range."""

    resource_type = ResourceType.HISTORICAL_IDR_USD.value

    def __init__(
        self,
        client: FrankfurterClient,
        start_date: str,
        end_date: str,
        from_currency: str = IDR_CURRENCY,
        to_currency: str = USD_CURRENCY,
    ) -> None:
        super().__init__(client)
        self.start_date = start_date
        self.end_date = end_date
        self.from_currency = from_currency
        self.to_currency = to_currency

    async def fetch(self) -> HistoricalRatesResponse:
        logger.info(
            "Fetching historical %s to %s rates (%s..%s) from Frankfurter API",
            self.from_currency, self.to_currency, self.start_date, self.end_date,
        )
        payload = await self._client.get_json(
            f"/{self.start_date}..{self.end_date}",
            params={"from": self.from_currency, "to": self.to_currency},
            resource_type=self.resource_type,
        )
        return self._decode(HistoricalRatesResponse, payload)


# ---------------------------------------------------------------------------
# supported_currencies
# ---------------------------------------------------------------------------

class SupportedCurrenciesStrategy(IdrDataFetcher):
    """Currency code → name listing."""

    resource_type = ResourceType.SUPPORTED_CURRENCIES.value

    async def fetch(self) -> CurrenciesResponse:
        logger.info("Fetching supported currencies from Frankfurter API")
        payload = await self._client.get_json("/currencies", resource_type=self.resource_type)
        return self._decode(CurrenciesResponse, payload)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def build_strategies(client: FrankfurterClient, seed: Optional[str] = None) -> List[IdrDataFetcher]:
    """Build one strategy per ResourceType, wired from ``idr_finance.config``."""
    seed = seed if seed is not None else config.GITHUB_USERNAME
    if not seed:
        raise InvalidArgumentError(
            "GITHUB_USERNAME is not set. It seeds the USD_BuySpread_IDR calculation; "
            "export GITHUB_USERNAME=<your GitHub username> and start the server again."
        )
    return [
        LatestIdrRatesStrategy(client, seed),
        HistoricalIdrUsdStrategy(
            client,
            start_date=config.HISTORICAL_START_DATE,
            end_date=config.HISTORICAL_END_DATE,
            from_currency=config.HISTORICAL_FROM_CURRENCY,
            to_currency=config.HISTORICAL_TO_CURRENCY,
        ),
        SupportedCurrenciesStrategy(client),
    ]

