from .price_service import GoldPrices, PriceQuote, PriceService

__all__ = ["GoldPrices", "PriceQuote", "PriceService"]
