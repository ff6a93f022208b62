"""TTL caches for upstream responses and resolutions."""

import time
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from ..models.resolution import CacheEntry

log = structlog.stdlib.get_logger()

Clock = Callable[[], float]

DEFAULT_TTL = 5 * 60.0
POPULAR_TTL = 30 * 60.0


def cache_key(action: str, identifier: str) -> str:
    """Build the ``action:identifier`` key used by the response cache."""
    return f"{action}:{identifier}"


class CachePolicy:
    """Per-action TTL lookup.

    Keys are ``action:identifier``; the action prefix selects the TTL and
    anything without an override gets the default.
    """

    def __init__(self, default_ttl: float = DEFAULT_TTL, overrides: Mapping[str, float] | None = None) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self.overrides: dict[str, float] = dict(overrides or {})

    @classmethod
    def for_upstream(cls, default_ttl: float = DEFAULT_TTL, popular_ttl: float = POPULAR_TTL) -> "CachePolicy":
        return cls(default_ttl, {"popular": popular_ttl})

    def ttl_for(self, key: str) -> float:
        action = key.split(":", 1)[0]
        return self.overrides.get(action, self.default_ttl)


class TTLCache:
    """Key/value cache whose entries go stale after a TTL.

    Staleness is decided at read time by comparing the entry age to the TTL
    for its key; stale entries are left in place until overwritten.
    """

    def __init__(self, policy: CachePolicy | None = None, clock: Clock = time.time, name: str = "cache") -> None:
        self.policy = policy or CachePolicy()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.name = name

    def lookup(self, key: str) -> CacheEntry | None:
        """Return the fresh entry for ``key``, or None on a miss or stale entry.

        A fresh entry may hold a None payload (a cached negative result).
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp < self.policy.ttl_for(key):
            log.debug("Cache hit", cache=self.name, key=key)
            return entry
        log.debug("Cache entry expired", cache=self.name, key=key)
        return None

    def get(self, key: str, default: Any = None) -> Any:
        entry = self.lookup(key)
        return default if entry is None else entry.payload

    def has_fresh(self, key: str) -> bool:
        return self.lookup(key) is not None

    def set(self, key: str, payload: Any) -> None:
        self._entries[key] = CacheEntry(payload=payload, timestamp=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        """Number of stored entries, stale ones included."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
