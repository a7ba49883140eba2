"""Tests for the gold price service."""

import random
from datetime import UTC, datetime

import httpx
import pytest

from src.luxgold.core.services.prices.price_service import (
    BASE_RIAL_PRICES,
    LIVE_SOURCE,
    SIMULATED_SOURCE,
    PriceService,
    normalize_quotes,
    simulate_raw_quotes,
)
from src.luxgold.runtime.config.config_data import PricesConfig

SAMPLE_PAYLOAD = {
    "price_dollar": {"p": "1,124,300", "d": "-2,500", "dp": "-0.22", "title": "دلار"},
    "price_eur": {"p": 1313700, "d": 1000, "dp": 0.08},
    "geram18": {"p": "67,214,000", "d": "150,000", "dp": "0.22", "title": "طلای ۱۸ عیار"},
    "sekeb": {"p": "1,074,800,000", "d": "0", "dp": "0"},
    "unrelated": {"p": "1"},
}


def _service(handler, **config) -> PriceService:
    return PriceService(
        PricesConfig(**{"cache_ttl_seconds": 0, **config}),
        transport=httpx.MockTransport(handler),
    )


class TestNormalizeQuotes:
    """Test conversion of the upstream payload."""

    def test_rial_to_toman(self):
        prices = normalize_quotes(SAMPLE_PAYLOAD, source=LIVE_SOURCE, is_live=True)
        assert prices.usd.price == 112430
        assert prices.usd.change == -250
        assert prices.usd.change_percent == pytest.approx(-0.22)
        assert prices.gold_coin.price == 107480000
        assert prices.gold18k.unit == "تومان/گرم"
        assert prices.usd.unit == "تومان"

    def test_default_titles(self):
        prices = normalize_quotes(SAMPLE_PAYLOAD, source=LIVE_SOURCE, is_live=True)
        assert prices.usd.title == "دلار"
        assert prices.euro.title == "یورو"

    def test_missing_instruments_are_none(self):
        prices = normalize_quotes(SAMPLE_PAYLOAD, source=LIVE_SOURCE, is_live=True)
        assert prices.gold24k is None

    def test_bad_numbers_become_zero(self):
        prices = normalize_quotes({"price_dollar": {"p": "n/a", "d": None}}, source="x", is_live=True)
        assert prices.usd.price == 0
        assert prices.usd.change == 0


class TestSimulatedQuotes:
    """Test the synthetic fallback data."""

    def test_within_one_percent_of_base(self):
        raw = simulate_raw_quotes(datetime(2025, 1, 1, tzinfo=UTC), random.Random(7))
        assert set(raw) == set(BASE_RIAL_PRICES)
        for key, base in BASE_RIAL_PRICES.items():
            assert abs(raw[key]["p"] - base) <= base * 0.01 + 1
            assert abs(raw[key]["d"]) <= base * 0.0005 + 1

    def test_deterministic_for_seeded_rng(self):
        now = datetime(2025, 1, 1, tzinfo=UTC)
        assert simulate_raw_quotes(now, random.Random(1)) == simulate_raw_quotes(now, random.Random(1))


class TestPriceService:
    """Test fetching with fallback."""

    @pytest.mark.asyncio
    async def test_live_prices(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            return httpx.Response(200, json=SAMPLE_PAYLOAD)

        prices = await _service(handler).get_latest_prices()
        assert prices.is_live is True
        assert prices.source == LIVE_SOURCE
        assert prices.usd.price == 112430
        assert seen["headers"]["x-requested-with"] == "XMLHttpRequest"

    @pytest.mark.asyncio
    async def test_http_error_falls_back(self):
        prices = await _service(lambda request: httpx.Response(503)).get_latest_prices()
        assert prices.is_live is False
        assert prices.source == SIMULATED_SOURCE
        assert all(
            quote is not None
            for quote in (prices.usd, prices.euro, prices.gold18k, prices.gold24k, prices.gold_coin)
        )

    @pytest.mark.asyncio
    async def test_empty_payload_falls_back(self):
        prices = await _service(lambda request: httpx.Response(200, json={})).get_latest_prices()
        assert prices.is_live is False

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back(self):
        prices = await _service(lambda request: httpx.Response(200, text="<html>")).get_latest_prices()
        assert prices.is_live is False

    @pytest.mark.asyncio
    async def test_network_error_falls_back(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        prices = await _service(handler).get_latest_prices()
        assert prices.is_live is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", ["nan", "1e400", "-inf", 10**400])
    async def test_non_finite_numbers_do_not_fail(self, price):
        payload = {"price_dollar": {"p": price, "d": "100", "dp": "nan"}}
        prices = await _service(lambda request: httpx.Response(200, json=payload)).get_latest_prices()
        assert prices.is_live is True
        assert prices.usd.price == 0
        assert prices.usd.change == 10
        assert prices.usd.change_percent == 0.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", [5, None, "", ["x"], {"fa": "x"}])
    async def test_unusable_title_uses_default(self, title):
        payload = {"price_dollar": {"p": 123, "title": title}}
        prices = await _service(lambda request: httpx.Response(200, json=payload)).get_latest_prices()
        assert prices.usd.price == 12
        assert prices.usd.title == "دلار آمریکا"

    @pytest.mark.asyncio
    async def test_payload_without_known_instruments_falls_back(self):
        payload = {"unrelated": {"p": "1"}, "price_dollar": "not an object"}
        prices = await _service(lambda request: httpx.Response(200, json=payload)).get_latest_prices()
        assert prices.is_live is False
        assert prices.source == SIMULATED_SOURCE
        assert prices.usd is not None

    @pytest.mark.asyncio
    async def test_normalization_failure_falls_back(self, monkeypatch):
        real = normalize_quotes
        calls = []

        def flaky(raw, source, is_live):
            calls.append(source)
            if is_live:
                raise ValueError("unexpected payload")
            return real(raw, source=source, is_live=is_live)

        monkeypatch.setattr(
            "src.luxgold.core.services.prices.price_service.normalize_quotes", flaky
        )
        prices = await _service(lambda request: httpx.Response(200, json=SAMPLE_PAYLOAD)).get_latest_prices()
        assert prices.is_live is False
        assert calls == [LIVE_SOURCE, SIMULATED_SOURCE]

    @pytest.mark.asyncio
    async def test_disabled_feed_is_not_called(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("upstream should not be called")

        prices = await _service(handler, enabled=False).get_latest_prices()
        assert prices.source == SIMULATED_SOURCE

    @pytest.mark.asyncio
    async def test_results_are_cached(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json=SAMPLE_PAYLOAD)

        service = _service(handler, cache_ttl_seconds=60)
        first = await service.get_latest_prices()
        second = await service.get_latest_prices()
        assert first is second
        assert calls == 1

        service.clear_cache()
        await service.get_latest_prices()
        assert calls == 2
