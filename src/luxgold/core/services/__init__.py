"""Core services exports."""

# Database Service
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# Prices
from .prices.price_service import PriceService

__all__ = [
    "DbManageService",
    "DbSessionService",
    "PriceService",
]
