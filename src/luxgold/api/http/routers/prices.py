"""Live gold and currency prices."""

import time

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from src.luxgold.api.http.deps import get_price_service

router = APIRouter(tags=["prices"])

_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"


@router.get("/gold-prices")
async def gold_prices(request: Request) -> JSONResponse:
    """Latest quotes in toman. Falls back to simulated data when the feed is down."""
    start = time.perf_counter()
    prices = await get_price_service(request).get_latest_prices()
    return JSONResponse(
        content={
            "success": True,
            "data": prices.model_dump(mode="json"),
            "latency_ms": round((time.perf_counter() - start) * 1000),
        },
        headers={"Cache-Control": _CACHE_CONTROL},
    )
