"""Resolution and caching data models."""

from dataclasses import dataclass
from typing import Any

from .game import GameRecord

CACHE_STRATEGY = "cache"
NO_STRATEGY = "none"


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving an identifier, with the strategy that produced it."""
    game: GameRecord | None
    strategy: str

    @property
    def found(self) -> bool:
        return self.game is not None


@dataclass(frozen=True)
class CacheEntry:
    """Cached payload stamped with the time it was stored."""
    payload: Any
    timestamp: float


@dataclass
class RateLimitCounter:
    """Request count for one identifier within the current window."""
    count: int
    last_request: float


@dataclass(frozen=True)
class AccessToken:
    """Bearer token for the game database."""
    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at
