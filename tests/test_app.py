from __future__ import annotations

import json
import time

import pytest
from fastapi.responses import Response
from fastapi.testclient import TestClient
from starlette.requests import Request

from idr_finance import app as app_module
from idr_finance.core.logging import current_context_id
from idr_finance.errors import FetchFailure, InvalidArgumentError
from idr_finance.metrics import metrics_snapshot


def _request(path: str = "/api/finance/data/latest_idr_rates") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "query_string": b"",
        "client": ("127.0.0.1", 50000),
        "scheme": "http",
        "server": ("testserver", 80),
    })


@pytest.mark.asyncio
async def test_request_logging_middleware_logs_structured_payload(caplog):
    async def _ok(_request: Request) -> Response:
        return Response(status_code=200)

    with caplog.at_level("INFO"):
        response = await app_module.request_logging_middleware(_request(), _ok)

    assert response.headers.get("X-Request-ID")
    line = next(msg for msg in caplog.messages if msg.startswith("request_log "))
    payload = json.loads(line.split(" ", 1)[1])
    assert payload["path"] == "/api/finance/data/latest_idr_rates"
    assert payload["status"] == 200


@pytest.mark.asyncio
async def test_request_logging_middleware_counts_server_errors():
    async def _fail(_request: Request) -> Response:
        return Response(status_code=500)

    await app_module.request_logging_middleware(_request("/boom"), _fail)
    assert metrics_snapshot()["errors_last_hour"] == 1


@pytest.mark.asyncio
async def test_request_id_is_bound_while_serving():
    seen = []

    async def _ok(_request: Request) -> Response:
        seen.append(current_context_id())
        return Response(status_code=200)

    request = Request({
        "type": "http",
        "method": "GET",
        "path": "/api/health",
        "headers": [(b"x-request-id", b"abc123")],
        "query_string": b"",
        "client": ("127.0.0.1", 50000),
        "scheme": "http",
        "server": ("testserver", 80),
    })
    response = await app_module.request_logging_middleware(request, _ok)

    assert seen == ["abc123"]
    assert response.headers["X-Request-ID"] == "abc123"
    assert current_context_id() == "-"


@pytest.mark.asyncio
async def test_exception_handlers_use_error_schema():
    bad = await app_module.invalid_argument_handler(_request(), InvalidArgumentError("USD rate cannot be null or zero"))
    upstream = await app_module.fetch_failure_handler(_request(), FetchFailure("HTTP 500", status_code=500))
    boom = await app_module.unhandled_exception_handler(_request(), RuntimeError("kaput"))

    assert bad.status_code == 400
    assert json.loads(bad.body)["error"] == "Invalid Argument"
    assert upstream.status_code == 502
    assert json.loads(upstream.body)["error"] == "External API Error"
    assert boom.status_code == 500
    assert json.loads(boom.body)["message"].endswith("kaput")


class _FakeClient:
    base_url = "https://rates.example"

    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


def test_lifespan_loads_in_background_and_serves_from_memory(monkeypatch, make_strategy):
    fake_client = _FakeClient()
    strategies = [
        make_strategy("latest_idr_rates", {"base": "IDR"}),
        make_strategy("historical_idr_usd", error=FetchFailure("down")),
        make_strategy("supported_currencies", {"IDR": "Indonesian Rupiah"}),
    ]
    monkeypatch.setattr(app_module, "FrankfurterClient", lambda: fake_client)
    monkeypatch.setattr(app_module, "build_strategies", lambda _client: strategies)

    with TestClient(app_module.app) as client:
        for _ in range(200):
            if client.get("/api/health").json()["ready"]:
                break
            time.sleep(0.01)

        assert client.get("/api/finance/data/latest_idr_rates").json() == [{"base": "IDR"}]
        assert client.get("/api/finance/data/historical_idr_usd").status_code == 404
        assert client.get("/api/finance/data/supported_currencies").status_code == 200

    assert fake_client.closed is True
    assert [s.calls for s in strategies] == [1, 1, 1]


def test_lifespan_reports_missing_seed(monkeypatch, caplog):
    fake_client = _FakeClient()
    monkeypatch.setattr(app_module.config, "GITHUB_USERNAME", "")
    monkeypatch.setattr(app_module, "FrankfurterClient", lambda: fake_client)

    with caplog.at_level("CRITICAL"):
        with pytest.raises(InvalidArgumentError, match="GITHUB_USERNAME is not set"):
            with TestClient(app_module.app):
                pass

    assert any(msg.startswith("Startup aborted: GITHUB_USERNAME") for msg in caplog.messages)
    assert fake_client.closed is True
