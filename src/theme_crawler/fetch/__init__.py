"""
Fetch Module - Cached, rate-limited HTTP access.

Components:
-----------
- ResponseCache: URL -> text store persisted as one JSON file
- HTTPFetcher: cache-first GET with redirect/404/error normalization
- RequestSlots / FixedDelayLimiter: request throttling
"""

from .response_cache import ResponseCache, CacheConfig
from .rate_limiter import RateLimitConfig, RequestSlots, FixedDelayLimiter
from .fetcher import HTTPFetcher, FetchConfig, SessionManager

__all__ = [
    'ResponseCache',
    'CacheConfig',
    'RateLimitConfig',
    'RequestSlots',
    'FixedDelayLimiter',
    'HTTPFetcher',
    'FetchConfig',
    'SessionManager',
]
