"""Quote service client tests."""

from __future__ import annotations

import httpx
import pytest

from gainbook.providers.price_service import (
    PriceServiceClient,
    PriceServiceError,
    StaticPriceSource,
    extract_price,
)


class StubResponse:
    def __init__(self, payload: object, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> object:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class StubClient:
    def __init__(self, payload: object = None, status_code: int = 200) -> None:
        self.payload = {"close": 187.25} if payload is None else payload
        self.status_code = status_code
        self.calls: list[dict[str, object]] = []

    async def get(
        self,
        url: str,
        params: dict[str, object],
        headers: dict[str, str],
        timeout: float,
    ) -> StubResponse:
        self.calls.append({"url": url, "params": params, "headers": headers})
        return StubResponse(self.payload, self.status_code)


def _client(stub: StubClient, **kwargs) -> PriceServiceClient:
    return PriceServiceClient("https://quotes.example/api/quote", client=stub, **kwargs)


@pytest.mark.asyncio
async def test_fetches_price_by_symbol():
    stub = StubClient()
    price = await _client(stub).get_latest_price("AAPL")

    assert price == pytest.approx(187.25)
    assert stub.calls[0]["params"] == {"symbol": "AAPL"}
    assert stub.calls[0]["headers"] == {}


@pytest.mark.asyncio
async def test_sends_bearer_token_when_configured():
    stub = StubClient()
    await _client(stub, token="secret").get_latest_price("AAPL")

    assert stub.calls[0]["headers"] == {"Authorization": "Bearer secret"}


@pytest.mark.asyncio
async def test_reads_configured_price_field():
    stub = StubClient({"close": 1.0, "last": "42.5"})
    price = await _client(stub, price_field="last").get_latest_price("MSFT")

    assert price == pytest.approx(42.5)


@pytest.mark.asyncio
async def test_http_error_status_raises():
    client = _client(StubClient({"error": "not found"}, status_code=404))

    with pytest.raises(PriceServiceError, match="HTTP error: 404"):
        await client.get_latest_price("ZZZZ")


@pytest.mark.asyncio
async def test_invalid_json_raises():
    client = _client(StubClient(ValueError("Expecting value")))

    with pytest.raises(PriceServiceError, match="invalid JSON"):
        await client.get_latest_price("AAPL")


@pytest.mark.asyncio
async def test_transport_failure_raises():
    class FailingClient(StubClient):
        async def get(self, url, params, headers, timeout):
            raise httpx.ConnectError("connection refused")

    with pytest.raises(PriceServiceError, match="Failed to reach price service"):
        await _client(FailingClient()).get_latest_price("AAPL")


@pytest.mark.asyncio
async def test_missing_url_raises_before_any_request():
    stub = StubClient()
    client = PriceServiceClient(client=stub)
    client.base_url = ""

    with pytest.raises(PriceServiceError, match="not configured"):
        await client.get_latest_price("AAPL")
    assert stub.calls == []


@pytest.mark.parametrize("payload", [{}, {"close": None}, {"close": ""}, {"close": 0}, []])
def test_extract_price_reports_missing_data(payload):
    with pytest.raises(PriceServiceError, match="No data returned for AAPL"):
        extract_price("AAPL", payload, "close")


@pytest.mark.parametrize("raw", ["n/a", -3, "nan", "inf"])
def test_extract_price_rejects_unusable_values(raw):
    with pytest.raises(PriceServiceError, match="Invalid current price for AAPL"):
        extract_price("AAPL", {"close": raw}, "close")


def test_extract_price_accepts_numeric_strings():
    assert extract_price("AAPL", {"close": "12.5"}, "close") == pytest.approx(12.5)


@pytest.mark.asyncio
async def test_static_price_source():
    source = StaticPriceSource({"aapl": 10, "BAD": "x"})

    assert await source.get_latest_price("AAPL") == pytest.approx(10)
    with pytest.raises(PriceServiceError, match="No data returned for MSFT"):
        await source.get_latest_price("MSFT")
    with pytest.raises(PriceServiceError, match="Invalid current price"):
        await source.get_latest_price("BAD")
