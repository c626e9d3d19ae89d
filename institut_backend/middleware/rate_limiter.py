"""
Rate Limiter - Token bucket per client IP.

Used as a FastAPI dependency on the AI routes (each call costs a Gemini
request):

    router = APIRouter(dependencies=[Depends(ai_rate_limit)])
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from fastapi import HTTPException, Request, Response, status

from institut_backend.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests: int = 20  # Maximum requests
    window: int = 60  # Time window in seconds
    burst: int = 5  # Burst allowance above limit
    key_prefix: str = "ai"

    @property
    def capacity(self) -> float:
        return float(self.requests + self.burst)

    @property
    def refill_rate(self) -> float:
        return self.requests / self.window


@dataclass
class RateLimitEntry:
    """Tracks rate limit state for a single client."""

    tokens: float
    last_update: float
    request_count: int = 0


class RateLimiter:
    """In-memory token bucket (per process)."""

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock=time.monotonic,
        *,
        trust_proxy_headers: bool = False,
    ):
        self.config = config or RateLimitConfig()
        self.trust_proxy_headers = trust_proxy_headers
        self._clock = clock
        self._buckets: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._cleanup_interval = 300
        self._last_cleanup = clock()

    def client_key(self, request: Request) -> str:
        client_ip = request.client.host if request.client else "unknown"
        if not self.trust_proxy_headers:
            return f"{self.config.key_prefix}:{client_ip}"
        # Derrière un proxy de confiance : X-Forwarded-For > X-Real-IP > client host
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            client_ip = forwarded.split(",")[0].strip()
        else:
            client_ip = request.headers.get("X-Real-IP") or client_ip
        return f"{self.config.key_prefix}:{client_ip}"

    def _refill(self, entry: RateLimitEntry, now: float) -> None:
        elapsed = max(0.0, now - entry.last_update)
        entry.tokens = min(self.config.capacity, entry.tokens + elapsed * self.config.refill_rate)
        entry.last_update = now

    def _cleanup_expired(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        expiry = now - (self.config.window * 2)
        expired = [key for key, entry in self._buckets.items() if entry.last_update < expiry]
        for key in expired:
            del self._buckets[key]
        self._last_cleanup = now
        if expired:
            logger.debug("Cleaned up %s expired rate limit entries", len(expired))

    def consume(self, key: str) -> tuple[bool, dict[str, str]]:
        """Consume one token for ``key``; returns (is_allowed, headers)."""
        with self._lock:
            now = self._clock()
            entry = self._buckets.get(key)
            if entry is None:
                entry = RateLimitEntry(tokens=self.config.capacity, last_update=now)
                self._buckets[key] = entry
            self._refill(entry, now)
            self._cleanup_expired(now)

            allowed = entry.tokens >= 1.0
            if allowed:
                entry.tokens -= 1.0
                entry.request_count += 1

            headers = {
                "X-RateLimit-Limit": str(self.config.requests),
                "X-RateLimit-Remaining": str(max(0, int(entry.tokens))),
            }
            if not allowed:
                retry_after = int((1.0 - entry.tokens) / self.config.refill_rate) + 1
                headers["Retry-After"] = str(retry_after)
            return allowed, headers


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the process-wide limiter for AI routes."""
    global _rate_limiter
    if _rate_limiter is None:
        settings = Settings.load()
        _rate_limiter = RateLimiter(
            RateLimitConfig(requests=settings.ai_rate_limit_per_minute),
            trust_proxy_headers=settings.trust_proxy_headers,
        )
    return _rate_limiter


def ai_rate_limit(request: Request, response: Response) -> None:
    limiter = get_rate_limiter()
    allowed, headers = limiter.consume(limiter.client_key(request))
    if not allowed:
        logger.warning("Limite IA atteinte pour %s", limiter.client_key(request))
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Trop de requêtes IA, réessayez plus tard.",
            headers=headers,
        )
    response.headers.update(headers)
