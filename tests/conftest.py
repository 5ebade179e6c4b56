"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • store              — fresh InMemoryDataStore
  • make_strategy(...) — fake fetch strategy with a canned result/error/delay
  • latest_json, historical_json, currencies_json — upstream bodies as raw JSON text
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Any, Optional

import pytest

# Ensure the project root is on the path so all idr_finance imports resolve.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from idr_finance.data_pipeline.strategies import IdrDataFetcher  # noqa: E402
from idr_finance.data_store import InMemoryDataStore, reset_data_store_for_tests  # noqa: E402
from idr_finance.metrics import reset_metrics_for_tests  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_singletons():
    reset_data_store_for_tests()
    reset_metrics_for_tests()
    yield
    reset_data_store_for_tests()
    reset_metrics_for_tests()


@pytest.fixture
def store() -> InMemoryDataStore:
    return InMemoryDataStore()


# ---------------------------------------------------------------------------
# Fake strategies
# ---------------------------------------------------------------------------

class FakeStrategy(IdrDataFetcher):
    def __init__(
        self,
        resource_type: str,
        result: Any = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ) -> None:
        super().__init__(client=None)
        self.resource_type = resource_type
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0
        self.cancelled = False

    async def fetch(self) -> Any:
        self.calls += 1
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_strategy():
    def _factory(resource_type: str, result: Any = "data", **kwargs) -> FakeStrategy:
        return FakeStrategy(resource_type, result=result, **kwargs)
    return _factory


# ---------------------------------------------------------------------------
# Upstream bodies
# ---------------------------------------------------------------------------

@pytest.fixture
def latest_json() -> str:
    return (
        '{"amount": 1.0, "base": "IDR", "date": "2024-01-05",'
        ' "rates": {"EUR": 0.000059, "SGD": 0.000086, "USD": 0.000064}}'
    )


@pytest.fixture
def historical_json() -> str:
    return (
        '{"amount": 1.0, "base": "IDR", "start_date": "2024-01-02", "end_date": "2024-01-05",'
        ' "rates": {"2024-01-02": {"USD": 0.000065}, "2024-01-03": {"USD": 0.000064},'
        ' "2024-01-04": {"USD": 0.000064}, "2024-01-05": {"USD": 0.000064}}}'
    )


@pytest.fixture
def currencies_json() -> str:
    return '{"EUR": "Euro", "IDR": "Indonesian Rupiah", "USD": "United States Dollar"}'
