"""
IDR Finance — Frankfurter API client.

Wraps every HTTP call to the upstream rates provider in one reusable class.
Each call is a single attempt: failures surface as ``FetchFailure`` and the
startup loader decides what to do with them.

Usage::

    client = FrankfurterClient()
    latest = await client.get_json("/latest", params={"base": "IDR"})
    await client.close()
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from idr_finance import config
from idr_finance.core.constants import USER_AGENT
from idr_finance.errors import FetchFailure

logger = logging.getLogger(__name__)

_HEADERS = {"User-Agent": USER_AGENT, "Accept": "application/json"}


class FrankfurterClient:
    """Async HTTP client for the Frankfurter exchange-rate API.

    Instantiate once per process; the internal httpx.AsyncClient is
    lazily created and shared by every fetch strategy.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        max_response_bytes: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or config.FRANKFURTER_BASE_URL).rstrip("/")
        self._connect_timeout = (
            connect_timeout if connect_timeout is not None else config.FRANKFURTER_CONNECT_TIMEOUT_SECONDS
        )
        self._read_timeout = read_timeout if read_timeout is not None else config.FRANKFURTER_READ_TIMEOUT_SECONDS
        self._max_response_bytes = (
            max_response_bytes if max_response_bytes is not None else config.FRANKFURTER_MAX_RESPONSE_BYTES
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client_get(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=_HEADERS,
                timeout=httpx.Timeout(self._read_timeout, connect=self._connect_timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_json(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        resource_type: Optional[str] = None,
    ) -> Any:
        """GET ``path`` once and return the decoded JSON body.

        JSON numbers with a fraction are decoded as ``Decimal``.  The body is
        streamed and abandoned as soon as it passes the size cap.  Raises
        ``FetchFailure`` tagged with ``resource_type`` for transport errors,
        non-2xx statuses, oversized bodies and undecodable JSON.
        """
        client = self._client_get()
        try:
            async with client.stream("GET", path, params=params) as resp:
                resp.raise_for_status()
                body = await self._read_capped(resp, path, resource_type)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("Frankfurter API HTTP error %s for %s", status, path)
            raise FetchFailure(
                f"Upstream returned HTTP {status} for {path}",
                resource_type=resource_type,
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Frankfurter API request failed for %s: %s", path, exc)
            raise FetchFailure(f"Upstream request failed for {path}: {exc}", resource_type=resource_type) from exc

        try:
            return json.loads(body, parse_float=Decimal)
        except ValueError as exc:
            raise FetchFailure(
                f"Upstream body for {path} is not valid JSON",
                resource_type=resource_type,
                status_code=resp.status_code,
            ) from exc

    async def _read_capped(self, resp: httpx.Response, path: str, resource_type: Optional[str]) -> bytes:
        too_large = FetchFailure(
            f"Upstream body for {path} exceeds {self._max_response_bytes} bytes",
            resource_type=resource_type,
            status_code=resp.status_code,
        )
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > self._max_response_bytes:
            raise too_large

        body = bytearray()
        async for chunk in resp.aiter_bytes():
            body.extend(chunk)
            if len(body) > self._max_response_bytes:
                raise too_large
        return bytes(body)

    async def close(self) -> None:
        """Cleanly close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
