"""
Backend middleware package.
"""

from .rate_limiter import (
    RateLimiter,
    RateLimitConfig,
    ai_rate_limit,
    get_rate_limiter,
)

__all__ = [
    "RateLimiter",
    "RateLimitConfig",
    "ai_rate_limit",
    "get_rate_limiter",
]
