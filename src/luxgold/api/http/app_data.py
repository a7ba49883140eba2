from dataclasses import dataclass, field

from src.luxgold.api.http.middleware.limiter import RateLimiterRegistry
from src.luxgold.core.services import DbSessionService, PriceService
from src.luxgold.core.services.auth import AdminSessionService


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    price_service: PriceService
    rate_limiters: RateLimiterRegistry
    session_service: AdminSessionService = field(default_factory=AdminSessionService)
