"""
goldapi.io spot price provider.

Quotes come from ``GET {base_url}/{metal}/USD`` authenticated with the
``x-access-token`` header and look like::

    {"price": 2345.6, "symbol": "XAU", "currency": "USD", "timestamp": 1718000000, ...}
"""

from __future__ import annotations

import time

import httpx
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from auxidien.core.exceptions import UpstreamFetchError
from auxidien.core.models import Metal, SpotQuote

from .base import SpotPriceProvider

DEFAULT_BASE_URL = "https://www.goldapi.io/api"


class GoldApiProvider(SpotPriceProvider):
    """Spot prices from goldapi.io over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("goldapi.io API key is required")
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "x-access-token": api_key,
                "Content-Type": "application/json",
                "User-Agent": "auxidien-watcher/0.1.0",
            },
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "goldapi"

    async def fetch(self, metal: Metal) -> SpotQuote:
        path = f"/{metal.value}/USD"
        started = time.perf_counter()
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(
                f"goldapi request for {metal.value} failed: {exc}", symbol=metal.value
            ) from exc

        if response.is_error:
            raise UpstreamFetchError(
                f"goldapi error for {metal.value}: {response.status_code} - {response.text}",
                symbol=metal.value,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            quote = SpotQuote.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise UpstreamFetchError(
                f"goldapi returned an unreadable quote for {metal.value}",
                symbol=metal.value,
                status_code=response.status_code,
                body=response.text,
            ) from exc

        logger.debug(
            "Fetched {} spot {:.4f} {} in {:.3f}s",
            metal.value,
            quote.price,
            quote.currency,
            time.perf_counter() - started,
        )
        return quote

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["DEFAULT_BASE_URL", "GoldApiProvider"]
