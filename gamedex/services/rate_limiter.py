"""Per-identifier request counting against the game database."""

import time
from collections.abc import Callable

import structlog

from ..models.resolution import RateLimitCounter

log = structlog.stdlib.get_logger()

RATE_LIMIT_WINDOW = 60.0
MAX_REQUESTS_PER_WINDOW = 50


class RateLimiter:
    """Approximate sliding-window limiter.

    A counter is reset to zero only once the gap since its last accepted
    request exceeds the window, so steady traffic keeps the window open.
    Rejected requests do not move ``last_request``.
    """

    def __init__(
        self,
        window: float = RATE_LIMIT_WINDOW,
        max_requests: int = MAX_REQUESTS_PER_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if window <= 0:
            raise ValueError("window must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.window = window
        self.max_requests = max_requests
        self._clock = clock
        self._counters: dict[str, RateLimitCounter] = {}

    def check(self, identifier: str) -> bool:
        """Record a request for ``identifier``; False when the budget is spent."""
        now = self._clock()
        counter = self._counters.get(identifier)
        if counter is None:
            counter = RateLimitCounter(count=0, last_request=now)
            self._counters[identifier] = counter

        if now - counter.last_request > self.window:
            counter.count = 0

        if counter.count >= self.max_requests:
            log.warning(
                "Rate limit reached",
                identifier=identifier,
                count=counter.count,
                window=self.window,
            )
            return False

        counter.count += 1
        counter.last_request = now
        return True

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        """Current counters, for health reporting."""
        return {
            identifier: {"count": counter.count, "last_request": counter.last_request}
            for identifier, counter in self._counters.items()
        }

    def reset(self) -> None:
        self._counters.clear()
