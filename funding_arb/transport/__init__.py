"""Rate-limited HTTP transport for upstream providers."""

from .rate_limiter import RateLimiter, RateLimiterRegistry
from .fetcher import ResilientFetcher, FetchResult

__all__ = ["RateLimiter", "RateLimiterRegistry", "ResilientFetcher", "FetchResult"]
