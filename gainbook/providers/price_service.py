"""Client helpers for the quote service that supplies current prices."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Protocol

import httpx

from gainbook.config import get_settings

logger = logging.getLogger(__name__)


class PriceServiceError(RuntimeError):
    """Raised when a current price cannot be obtained for a symbol."""


class PriceSource(Protocol):
    """Pluggable current-price provider."""

    async def get_latest_price(self, symbol: str) -> float:
        ...


def extract_price(symbol: str, payload: Any, price_field: str) -> float:
    """Pull a usable price out of a quote payload or raise ``PriceServiceError``."""

    raw = payload.get(price_field) if isinstance(payload, Mapping) else None
    if raw is None or raw == "" or raw == 0 or isinstance(raw, bool):
        raise PriceServiceError(f"No data returned for {symbol}")
    try:
        price = float(raw)
    except (TypeError, ValueError) as exc:
        raise PriceServiceError(f"Invalid current price for {symbol}: {raw!r}") from exc
    if not math.isfinite(price) or price <= 0:
        raise PriceServiceError(f"Invalid current price for {symbol}: {raw!r}")
    return price


class PriceServiceClient:
    """HTTP quote client: ``GET <base_url>?symbol=<SYMBOL>`` returning JSON."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        price_field: str | None = None,
        token: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = base_url or settings.price_service_url or ""
        self.price_field = price_field or settings.price_field
        self.token = token if token is not None else settings.price_service_token
        self.timeout_seconds = timeout_seconds or settings.price_service_timeout_seconds
        self._client = client

    async def _get(self, params: dict[str, Any], headers: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(
                self.base_url, params=params, headers=headers, timeout=self.timeout_seconds
            )
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await client.get(self.base_url, params=params, headers=headers)

    async def fetch_quote(self, symbol: str) -> Any:
        """Return the decoded JSON quote payload for *symbol*."""

        if not self.base_url:
            raise PriceServiceError("Price service URL is not configured")
        headers: dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = await self._get({"symbol": symbol}, headers)
        except httpx.HTTPError as exc:
            raise PriceServiceError(f"Failed to reach price service for {symbol}: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("Price service error %s for %s", response.status_code, symbol)
            raise PriceServiceError(f"HTTP error: {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise PriceServiceError("Price service returned invalid JSON payload") from exc

    async def get_latest_price(self, symbol: str) -> float:
        payload = await self.fetch_quote(symbol)
        return extract_price(symbol, payload, self.price_field)


class StaticPriceSource:
    """Fixed price table for tests and offline use."""

    def __init__(self, prices: Mapping[str, float | str]):
        self._prices = {symbol.upper(): value for symbol, value in prices.items()}

    async def get_latest_price(self, symbol: str) -> float:
        if symbol not in self._prices:
            raise PriceServiceError(f"No data returned for {symbol}")
        return extract_price(symbol, {"close": self._prices[symbol]}, "close")


__all__ = [
    "PriceServiceClient",
    "PriceServiceError",
    "PriceSource",
    "StaticPriceSource",
    "extract_price",
]
