"""FastAPI application setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.luxgold.api.http.app_data import ApplicationDependencies
from src.luxgold.api.http.errors import ApiError, api_error_handler, unhandled_error_response
from src.luxgold.api.http.middleware.limiter import RateLimiterRegistry
from src.luxgold.api.http.routers import auth, catalog, csrf, health, prices
from src.luxgold.api.http.routers.admin import attributes as admin_attributes
from src.luxgold.api.http.routers.admin import categories as admin_categories
from src.luxgold.api.http.routers.admin import coupons as admin_coupons
from src.luxgold.api.http.routers.admin import orders as admin_orders
from src.luxgold.api.http.routers.admin import products as admin_products
from src.luxgold.api.http.routers.admin import variations as admin_variations
from src.luxgold.api.utils.app_startup import configure_logging
from src.luxgold.core.services import DbManageService, DbSessionService, PriceService
from src.luxgold.core.services.auth import AdminSessionService
from src.luxgold.runtime.config.env_validation import validate_and_log_environment
from src.luxgold.runtime.context import get_config

# Initialize logging
configure_logging()

API_PREFIX = "/api"


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=()")
        if request.url.path.startswith(f"{API_PREFIX}/"):
            response.headers.setdefault("Cache-Control", "no-store")
        # HSTS only in prod
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="Lux Gold Catalog API",
    lifespan=lifespan,
    docs_url=None if get_config().app.environment == "production" else "/docs",
    redoc_url=None if get_config().app.environment == "production" else "/redoc",
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_exception_handler(ApiError, api_error_handler)

# expose startup for tests
__all__ = ["app", "startup", "shutdown"]

# --- CORS configuration ---
if get_config().app.environment == "production" and ("*" in get_config().app.cors.origins):
    raise RuntimeError(
        "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.cors.origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    # Only trust X-Forwarded-For behind a reverse proxy
    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            response = unhandled_error_response(exc, request_id)
            response.headers["X-Request-ID"] = request_id
            return response


# --- Router registration ---
app.include_router(csrf.router, prefix=API_PREFIX)
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(health.router, prefix=API_PREFIX)
app.include_router(catalog.router, prefix=API_PREFIX)
app.include_router(prices.router, prefix=API_PREFIX)
app.include_router(admin_products.router, prefix=API_PREFIX)
app.include_router(admin_categories.router, prefix=API_PREFIX)
app.include_router(admin_coupons.router, prefix=API_PREFIX)
app.include_router(admin_orders.router, prefix=API_PREFIX)
app.include_router(admin_attributes.router, prefix=API_PREFIX)
app.include_router(admin_variations.router, prefix=API_PREFIX)


def build_dependencies() -> ApplicationDependencies:
    config = get_config()
    return ApplicationDependencies(
        database_service=DbSessionService(),
        price_service=PriceService(config.prices),
        rate_limiters=RateLimiterRegistry(config.rate_limiter),
        session_service=AdminSessionService(config.auth),
    )


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # Fail fast on misconfiguration
    validate_and_log_environment(config)

    deps = build_dependencies()
    DbManageService(deps.database_service).create_all()
    app.state.app_dependencies = deps


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is None:
        return
    await app_dependencies.rate_limiters.close()
    app_dependencies.price_service.clear_cache()
    app_dependencies.database_service.dispose()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
