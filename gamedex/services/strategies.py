"""Lookup strategies used to resolve a slug or id to a single game."""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable

import structlog

from ..models.game import GameRecord
from .igdb_client import IGDBClient
from .matching import find_best_match, slug_to_name

log = structlog.stdlib.get_logger()

GENERATED_SLUG_PATTERN = re.compile(r"game-([0-9]+)")


class GameSearchStrategy(ABC):
    """One way of turning an identifier into a game.

    ``search`` never raises: failures are logged and reported as no result
    so the resolver can move on to the next strategy.
    """

    name: str = ""

    async def search(self, identifier: str) -> GameRecord | None:
        try:
            return await self._search(identifier)
        except Exception as e:
            log.warning(
                "Lookup strategy failed",
                strategy=self.name,
                identifier=identifier,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    @abstractmethod
    async def _search(self, identifier: str) -> GameRecord | None:
        ...


class ExactSlugStrategy(GameSearchStrategy):
    """Matches when the stored upstream slug equals the identifier."""

    name = "ExactSlug"

    def __init__(self, client: IGDBClient) -> None:
        self._client = client

    async def _search(self, identifier: str) -> GameRecord | None:
        log.debug("Searching by exact slug", slug=identifier)
        return await self._client.get_game_by_slug(identifier)


class IDSearchStrategy(GameSearchStrategy):
    """Handles synthesized ``game-<id>`` slugs by fetching the id directly."""

    name = "IDSearch"

    def __init__(self, client: IGDBClient) -> None:
        self._client = client

    async def _search(self, identifier: str) -> GameRecord | None:
        match = GENERATED_SLUG_PATTERN.fullmatch(identifier)
        if match is None:
            return None
        game_id = int(match.group(1))
        log.debug("Searching by id", game_id=game_id)
        return await self._client.get_game_details(game_id)


class NameSearchStrategy(GameSearchStrategy):
    """Searches by the title derived from the slug and keeps the best candidate."""

    name = "NameSearch"

    def __init__(self, client: IGDBClient, limit: int = 1) -> None:
        self._client = client
        self.limit = limit

    async def _search(self, identifier: str) -> GameRecord | None:
        title = slug_to_name(identifier)
        log.debug("Searching by derived name", slug=identifier, title=title)
        candidates = await self._client.search_games(title, limit=self.limit)
        return find_best_match(candidates, title, identifier, now=self._client.state.clock())


class LocalCacheStrategy(GameSearchStrategy):
    """Looks the slug up in the local collection.

    Without a lookup function this strategy never matches.
    """

    name = "LocalCache"

    def __init__(self, lookup: Callable[[str], GameRecord | None] | None = None) -> None:
        self._lookup = lookup

    async def _search(self, identifier: str) -> GameRecord | None:
        if self._lookup is None:
            return None
        log.debug("Searching local collection", slug=identifier)
        return self._lookup(identifier)


def default_strategies(
    client: IGDBClient,
    local_lookup: Callable[[str], GameRecord | None] | None = None,
    name_search_limit: int = 1,
) -> list[GameSearchStrategy]:
    """Strategies in resolution priority order."""
    return [
        ExactSlugStrategy(client),
        IDSearchStrategy(client),
        NameSearchStrategy(client, limit=name_search_limit),
        LocalCacheStrategy(local_lookup),
    ]
