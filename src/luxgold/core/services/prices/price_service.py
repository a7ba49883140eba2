"""Live gold and currency prices.

Quotes come from the TGJU AJAX endpoint, which answers with a mapping of
instrument keys to ``{"p": price, "d": change, "dp": change_percent,
"title": ...}`` in rial. When the feed is unreachable or empty a realistic
synthetic set is generated instead, so callers always get a full answer.
"""

import math
import random
import time
from datetime import UTC, datetime
from typing import Any

import httpx
from cachetools import TTLCache
from loguru import logger
from pydantic import BaseModel, Field

from src.luxgold.runtime.config.config_data import PricesConfig
from src.luxgold.runtime.context import get_config

LIVE_SOURCE = "tgju.org/ajax"
SIMULATED_SOURCE = "simulated"

TOMAN = "تومان"
TOMAN_PER_GRAM = "تومان/گرم"

# upstream key -> (field, default title, unit)
QUOTE_KEYS: dict[str, tuple[str, str, str]] = {
    "price_dollar": ("usd", "دلار آمریکا", TOMAN),
    "price_eur": ("euro", "یورو", TOMAN),
    "geram18": ("gold18k", "طلای ۱۸ عیار", TOMAN_PER_GRAM),
    "geram24": ("gold24k", "طلای ۲۴ عیار", TOMAN_PER_GRAM),
    "sekeb": ("gold_coin", "سکه بهار آزادی", TOMAN),
}

# Reference prices in rial used for simulated quotes
BASE_RIAL_PRICES: dict[str, int] = {
    "price_dollar": 1_124_300,
    "price_eur": 1_313_700,
    "geram18": 67_214_000,
    "geram24": 89_619_000,
    "sekeb": 1_074_800_000,
}

_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class PriceQuote(BaseModel):
    """One instrument, in toman."""

    price: int
    change: int
    change_percent: float
    title: str
    unit: str


class GoldPrices(BaseModel):
    usd: PriceQuote | None = None
    euro: PriceQuote | None = None
    gold18k: PriceQuote | None = None
    gold24k: PriceQuote | None = None
    gold_coin: PriceQuote | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    source: str
    is_live: bool


def _parse_number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").strip() or 0
    elif not isinstance(value, int | float):
        return 0.0
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return 0.0
    # "nan", "inf" and overflowing literals such as "1e400"
    return number if math.isfinite(number) else 0.0


def _title(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def rial_to_toman(value: float) -> int:
    return math.floor(value / 10)


def normalize_quotes(raw: dict[str, Any], source: str, is_live: bool) -> GoldPrices:
    """Convert an upstream payload to toman quotes, ignoring unknown keys."""
    quotes: dict[str, PriceQuote] = {}
    for key, item in raw.items():
        if key not in QUOTE_KEYS or not isinstance(item, dict):
            continue
        field, default_title, unit = QUOTE_KEYS[key]
        quotes[field] = PriceQuote(
            price=rial_to_toman(_parse_number(item.get("p"))),
            change=rial_to_toman(_parse_number(item.get("d"))),
            change_percent=_parse_number(item.get("dp")),
            title=_title(item.get("title"), default_title),
            unit=unit,
        )
    return GoldPrices(**quotes, source=source, is_live=is_live)


def simulate_raw_quotes(now: datetime, rng: random.Random | None = None) -> dict[str, Any]:
    """Build an upstream-shaped payload around ``BASE_RIAL_PRICES``.

    Prices drift along a sine wave with a period of roughly six hours and
    an amplitude of one percent; the daily change is random.
    """
    rng = rng or random.Random()
    variation = math.sin(now.timestamp() / 3600) * 0.01
    raw: dict[str, Any] = {}
    for key, base in BASE_RIAL_PRICES.items():
        raw[key] = {
            "p": math.floor(base * (1 + variation)),
            "d": math.floor(base * 0.001 * (rng.random() - 0.5)),
            "dp": round(variation * 100, 2),
            "title": QUOTE_KEYS[key][1],
        }
    return raw


class PriceService:
    """Fetches, normalizes and briefly caches the latest quotes."""

    _CACHE_KEY = "latest"

    def __init__(
        self,
        config: PricesConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_config().prices
        self._transport = transport
        self._cache: TTLCache[str, GoldPrices] | None = (
            TTLCache(maxsize=1, ttl=self._config.cache_ttl_seconds)
            if self._config.cache_ttl_seconds > 0
            else None
        )

    async def fetch_raw_quotes(self) -> dict[str, Any] | None:
        """Query the upstream feed. Returns None on any failure or an empty payload."""
        if not self._config.enabled:
            return None

        headers = {
            "User-Agent": _USER_AGENT,
            "Accept": "application/json",
            "Referer": self._config.referer,
            "X-Requested-With": "XMLHttpRequest",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(self._config.source_url, headers=headers)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.bind(error_type=type(e).__name__).warning(
                "Price feed request failed: {}", e
            )
            return None

        if not isinstance(data, dict) or not data:
            logger.warning("Price feed returned an empty payload")
            return None
        return data

    async def get_latest_prices(self) -> GoldPrices:
        """Return the latest quotes, falling back to simulated data."""
        if self._cache is not None:
            cached = self._cache.get(self._CACHE_KEY)
            if cached is not None:
                return cached

        start = time.perf_counter()
        raw = await self.fetch_raw_quotes()
        prices = self._live_prices(raw) if raw is not None else None
        if prices is None:
            logger.info("Using simulated gold prices")
            prices = normalize_quotes(
                simulate_raw_quotes(datetime.now(UTC)),
                source=SIMULATED_SOURCE,
                is_live=False,
            )

        logger.bind(
            source=prices.source,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        ).info("Gold prices refreshed")

        if self._cache is not None:
            self._cache[self._CACHE_KEY] = prices
        return prices

    @staticmethod
    def _live_prices(raw: dict[str, Any]) -> GoldPrices | None:
        """Normalize a live payload, or None when it carries no usable quote."""
        if not any(isinstance(raw.get(key), dict) for key in QUOTE_KEYS):
            logger.warning("Price feed payload has none of the expected instruments")
            return None
        try:
            return normalize_quotes(raw, source=LIVE_SOURCE, is_live=True)
        except (ValueError, OverflowError) as e:
            logger.bind(error_type=type(e).__name__).warning(
                "Price feed payload could not be normalized: {}", e
            )
            return None

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()
