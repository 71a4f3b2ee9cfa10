"""
Rate Limiting Middleware

Per-client token buckets. Admin routes fan out to Twilio and FCM,
so they draw from a separate, smaller bucket than the rest of the API.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from healthtracker.config.logging_config import get_logger
from healthtracker.infrastructure.metrics import RATE_LIMIT_EXCEEDED

logger = get_logger(__name__)


@dataclass
class RateLimitConfig:
    requests_per_minute: int = 60
    admin_requests_per_minute: int = 20
    # Extra tokens on top of one minute's allowance
    burst_size: int = 10
    admin_prefix: str = "/api/admin"
    trust_forwarded_for: bool = False


@dataclass
class TokenBucket:
    """Refills continuously at `rate` tokens per second up to `capacity`."""

    rate: float
    capacity: int
    tokens: float = field(init=False)
    last_update: float = field(init=False, default_factory=time.monotonic)
    _lock: asyncio.Lock = field(init=False, repr=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        self.tokens = float(self.capacity)

    @classmethod
    def per_minute(cls, limit: int, burst: int) -> "TokenBucket":
        return cls(rate=limit / 60.0, capacity=limit + burst)

    def _refill(self, now: float) -> None:
        self.tokens = min(float(self.capacity), self.tokens + (now - self.last_update) * self.rate)
        self.last_update = now

    async def acquire(self, tokens: int = 1) -> bool:
        """Take `tokens` if available; False means the caller is limited."""
        async with self._lock:
            self._refill(time.monotonic())
            if self.tokens < tokens:
                return False
            self.tokens -= tokens
            return True

    @property
    def available_tokens(self) -> int:
        return int(self.tokens)


class RateLimiter:
    """Keeps one bucket per (tier, client id)."""

    INACTIVE_SECONDS = 600

    def __init__(self, config: Optional[RateLimitConfig] = None) -> None:
        self.config = config or RateLimitConfig()
        self._buckets: dict[str, TokenBucket] = {}
        self._admin_buckets: dict[str, TokenBucket] = {}

    def _bucket_for(self, client_id: str, is_admin_endpoint: bool) -> TokenBucket:
        if is_admin_endpoint:
            buckets, limit = self._admin_buckets, self.config.admin_requests_per_minute
        else:
            buckets, limit = self._buckets, self.config.requests_per_minute
        bucket = buckets.get(client_id)
        if bucket is None:
            bucket = buckets[client_id] = TokenBucket.per_minute(limit, self.config.burst_size)
        return bucket

    async def check_rate_limit(
        self,
        client_id: str,
        is_admin_endpoint: bool = False,
    ) -> tuple[bool, int]:
        """
        Spend one token for `client_id`.

        Returns:
            (allowed, tokens left in the bucket)
        """
        bucket = self._bucket_for(client_id, is_admin_endpoint)
        allowed = await bucket.acquire()

        if not allowed:
            tier = "admin" if is_admin_endpoint else "standard"
            RATE_LIMIT_EXCEEDED.labels(client_type=tier).inc()
            logger.warning("Rate limit exceeded", client_id=client_id, tier=tier)

        return allowed, bucket.available_tokens

    def cleanup_inactive_buckets(self) -> int:
        """Forget clients idle for ten minutes; returns how many were dropped."""
        cutoff = time.monotonic() - self.INACTIVE_SECONDS
        removed = 0
        for buckets in (self._buckets, self._admin_buckets):
            for client_id in [cid for cid, b in buckets.items() if b.last_update < cutoff]:
                del buckets[client_id]
                removed += 1
        return removed


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies RateLimiter to every request except probes, metrics and docs.

    Rejections are 429 with `Retry-After: 60`; allowed responses carry
    `X-RateLimit-Remaining`.
    """

    EXEMPT_PATHS = frozenset({"/health", "/health/live", "/health/ready", "/metrics", "/openapi.json"})
    EXEMPT_PREFIXES = ("/docs", "/redoc")
    CLEANUP_EVERY = 1000

    def __init__(self, app, config: Optional[RateLimitConfig] = None) -> None:
        super().__init__(app)
        self.limiter = RateLimiter(config)
        self._seen = 0

    def _is_exempt(self, path: str) -> bool:
        return path in self.EXEMPT_PATHS or path.startswith(self.EXEMPT_PREFIXES)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if self._is_exempt(path):
            return await call_next(request)

        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self.limiter.cleanup_inactive_buckets()

        config = self.limiter.config
        allowed, remaining = await self.limiter.check_rate_limit(
            client_id_for(request, trust_forwarded_for=config.trust_forwarded_for),
            is_admin_endpoint=path.startswith(config.admin_prefix),
        )
        if not allowed:
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded. Please try again later."},
                headers={"X-RateLimit-Remaining": "0", "Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


def client_id_for(request: Request, trust_forwarded_for: bool = False) -> str:
    """
    Client IP. The first X-Forwarded-For hop is used only when
    `trust_forwarded_for` is set; otherwise clients could pick their bucket.
    """
    client_ip = ""
    if trust_forwarded_for:
        client_ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not client_ip:
        client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
