"""In-memory sliding window rate limiting for the HTTP layer."""

from __future__ import annotations

import asyncio
import math
import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request
from loguru import logger

from src.luxgold.runtime.config.config_data import RateLimiterConfig


class LocalRateLimiter:
    """Allow ``times`` requests per client key in any ``milliseconds`` window."""

    def __init__(
        self, times: int, milliseconds: int, per_endpoint: bool, per_method: bool
    ) -> None:
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._times = times
        self._seconds = milliseconds / 1000
        self._per_endpoint = per_endpoint
        self._per_method = per_method
        self._last_cleanup = time.monotonic()
        self._cleanup_interval = 60.0  # seconds

    async def __call__(self, request: Request) -> None:
        key = self._make_key(request)
        await self._throttle(key)

    def _make_key(self, request: Request) -> str:
        xff = request.headers.get("x-forwarded-for")
        if xff:
            client_host = xff.split(",")[0].strip()
        else:
            client_host = request.client.host if request.client else "anonymous"
        parts = [f"ip:{client_host}"]

        if self._per_method:
            parts.append(request.method)
        if self._per_endpoint:
            route = request.scope.get("route")
            template = getattr(route, "path", None)
            parts.append((template or request.url.path).rstrip("/"))
        return ":".join(parts)

    def _cleanup_old_keys(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now

        stale = []
        for key, hits in self._hits.items():
            while hits and hits[0] <= now - self._seconds:
                hits.popleft()
            if not hits:
                stale.append(key)
        for key in stale:
            del self._hits[key]

    async def cleanup(self) -> None:
        async with self._lock:
            tracked = len(self._hits)
            self._hits.clear()
        logger.debug("Cleaned up local rate limiter with {} tracked keys", tracked)

    async def _throttle(self, key: str) -> None:
        now = time.monotonic()
        window_start = now - self._seconds
        async with self._lock:
            self._cleanup_old_keys(now)
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= self._times:
                retry_after = max(1, math.ceil(self._seconds - (now - hits[0])))
                logger.bind(rate_limit_key=key).warning("Rate limit exceeded")
                raise HTTPException(
                    status_code=429,
                    detail="Too Many Requests",
                    headers={"Retry-After": str(retry_after)},
                )
            hits.append(now)


class RateLimiterRegistry:
    """Hands out one limiter per (requests, window) pair.

    Owned by the application dependencies, created at startup and cleared
    at shutdown.
    """

    def __init__(self, config: RateLimiterConfig) -> None:
        self._config = config
        self._limiters: dict[tuple[int, int], LocalRateLimiter] = {}

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def get(self, requests: int | None = None, window_ms: int | None = None) -> LocalRateLimiter:
        times = requests if requests is not None else self._config.requests
        window = window_ms if window_ms is not None else self._config.window_ms
        limiter = self._limiters.get((times, window))
        if limiter is None:
            limiter = LocalRateLimiter(
                times, window, self._config.per_endpoint, self._config.per_method
            )
            self._limiters[(times, window)] = limiter
        return limiter

    async def close(self) -> None:
        if self._limiters:
            logger.info("Cleaning up {} local rate limiter instances", len(self._limiters))
        for limiter in self._limiters.values():
            await limiter.cleanup()
        self._limiters.clear()
