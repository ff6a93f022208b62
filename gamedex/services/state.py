"""Process-wide mutable state shared by the upstream client and resolver."""

import time
from collections.abc import Callable

from ..models.config import AppConfig
from ..models.resolution import AccessToken
from .cache import CachePolicy, TTLCache
from .rate_limiter import RateLimiter


class UpstreamState:
    """Token, rate-limit counters and caches for one set of upstream credentials.

    Built once per process and injected into the client and resolver. All
    access happens on one event loop; introducing threads would require
    locking around every attribute here.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        response_cache: TTLCache | None = None,
        resolution_cache: TTLCache | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.clock = clock
        self.token: AccessToken | None = None
        self.rate_limiter = rate_limiter or RateLimiter(clock=clock)
        self.response_cache = response_cache or TTLCache(
            CachePolicy.for_upstream(), clock=clock, name="response"
        )
        self.resolution_cache = resolution_cache or TTLCache(CachePolicy(), clock=clock, name="resolution")

    @classmethod
    def from_config(cls, config: AppConfig, clock: Callable[[], float] = time.time) -> "UpstreamState":
        return cls(
            rate_limiter=RateLimiter(
                window=config.rate_limit_window,
                max_requests=config.rate_limit_max_requests,
                clock=clock,
            ),
            response_cache=TTLCache(
                CachePolicy.for_upstream(config.cache_ttl, config.popular_cache_ttl),
                clock=clock,
                name="response",
            ),
            resolution_cache=TTLCache(
                CachePolicy(config.resolution_cache_ttl),
                clock=clock,
                name="resolution",
            ),
            clock=clock,
        )

    def reset(self) -> None:
        """Forget the token, counters and every cached entry."""
        self.token = None
        self.rate_limiter.reset()
        self.response_cache.clear()
        self.resolution_cache.clear()
