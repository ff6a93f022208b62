"""Resolution of arbitrary slugs and ids to a single game."""

from collections.abc import Sequence

import structlog

from ..models.resolution import CACHE_STRATEGY, NO_STRATEGY, ResolutionResult
from .cache import TTLCache
from .strategies import GameSearchStrategy

log = structlog.stdlib.get_logger()


class GameResolver:
    """Runs lookup strategies in order and memoizes the outcome per identifier.

    Strategies are awaited one at a time so they share the upstream rate
    limit predictably. Misses are memoized too, so a bad slug requested in a
    loop costs one strategy walk per TTL.
    """

    def __init__(self, strategies: Sequence[GameSearchStrategy], cache: TTLCache) -> None:
        if not strategies:
            raise ValueError("at least one strategy is required")
        self.strategies: list[GameSearchStrategy] = list(strategies)
        self._cache = cache

    async def resolve(self, identifier: str) -> ResolutionResult:
        cached = self._cache.lookup(identifier)
        if cached is not None:
            log.debug("Resolution cache hit", identifier=identifier, found=cached.payload is not None)
            # A remembered miss is still reported as a miss
            strategy = CACHE_STRATEGY if cached.payload is not None else NO_STRATEGY
            return ResolutionResult(game=cached.payload, strategy=strategy)

        for strategy in self.strategies:
            log.debug("Trying strategy", strategy=strategy.name, identifier=identifier)
            game = await strategy.search(identifier)
            if game is not None:
                self._cache.set(identifier, game)
                log.info("Game resolved", identifier=identifier, strategy=strategy.name, game_id=game.id)
                return ResolutionResult(game=game, strategy=strategy.name)

        self._cache.set(identifier, None)
        log.info("No game found", identifier=identifier)
        return ResolutionResult(game=None, strategy=NO_STRATEGY)

    def clear_cache(self) -> None:
        self._cache.clear()
