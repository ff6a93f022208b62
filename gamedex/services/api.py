"""Action dispatcher exposed to the UI/API layer."""

import asyncio
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from ..models.resolution import NO_STRATEGY
from .errors import ErrorHandlingService, ValidationError, get_error_service
from .igdb_client import IGDBClient
from .resolver import GameResolver
from .state import UpstreamState

log = structlog.stdlib.get_logger()

ACTIONS = ("search", "details", "slug", "popular")
DEFAULT_LIMIT = 20
MAX_LIMIT = 500
MIN_QUERY_LENGTH = 2


@dataclass(frozen=True)
class ApiResponse:
    """Payload plus HTTP-style status; ``strategy`` is set for slug lookups."""
    status: int
    body: Any
    strategy: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class GameApiService:
    """Validates ``{action, query, gameId, slug, limit}`` requests and routes them."""

    def __init__(
        self,
        client: IGDBClient,
        resolver: GameResolver,
        state: UpstreamState,
        error_service: ErrorHandlingService | None = None,
        search_timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._resolver = resolver
        self._state = state
        self._errors = error_service or get_error_service()
        self.search_timeout = search_timeout

    async def handle(self, payload: Mapping[str, Any]) -> ApiResponse:
        """Dispatch one request; errors come back as a status and message."""
        start = time.perf_counter()
        action = payload.get("action")
        log.info(
            "API request",
            action=action,
            query=payload.get("query"),
            game_id=payload.get("gameId"),
            slug=payload.get("slug"),
        )

        try:
            response = await self._dispatch(action, payload)
        except Exception as e:
            app_error = self._errors.convert(e, operation=str(action), component="api")
            self._errors.handle_error(app_error, operation=str(action), component="api", context=dict(payload))
            response = ApiResponse(status=self._errors.status_for(app_error), body={"error": app_error.message})

        log.info(
            "API request completed",
            action=action,
            status=response.status,
            elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return response

    def health(self) -> dict[str, Any]:
        """Cache sizes, rate-limit counters and recent error counts."""
        return {
            "status": "healthy",
            "cacheSize": self._state.response_cache.size,
            "resolutionCacheSize": self._state.resolution_cache.size,
            "rateLimitStats": self._state.rate_limiter.snapshot(),
            "errorCounts": {
                category.value: count for category, count in self._errors.get_error_count_by_category().items()
            },
        }

    async def _dispatch(self, action: Any, payload: Mapping[str, Any]) -> ApiResponse:
        if not action:
            raise ValidationError("Action is required", field="action")

        if action == "search":
            query = payload.get("query")
            if not isinstance(query, str) or len(query.strip()) < MIN_QUERY_LENGTH:
                raise ValidationError(
                    f"Query must be at least {MIN_QUERY_LENGTH} characters",
                    field="query",
                    value=query,
                )
            limit = self._parse_limit(payload.get("limit"))
            games = await asyncio.wait_for(self._client.search_games(query.strip(), limit), timeout=self.search_timeout)
            return ApiResponse(status=200, body=[game.to_dict() for game in games])

        if action == "details":
            game_id = self._parse_game_id(payload.get("gameId"))
            game = await self._client.get_game_details(game_id)
            if game is None:
                return ApiResponse(status=404, body={"error": "Game not found"})
            return ApiResponse(status=200, body=game.to_dict())

        if action == "slug":
            slug = payload.get("slug")
            if not isinstance(slug, str) or not slug.strip():
                raise ValidationError("Slug is required", field="slug")
            result = await self._resolver.resolve(slug.strip())
            if result.game is None:
                return ApiResponse(status=404, body={"error": "Game not found"}, strategy=NO_STRATEGY)
            return ApiResponse(status=200, body=result.game.to_dict(), strategy=result.strategy)

        if action == "popular":
            limit = self._parse_limit(payload.get("limit"))
            games = await self._client.get_popular_games(limit)
            return ApiResponse(status=200, body=[game.to_dict() for game in games])

        raise ValidationError("Invalid action", field="action", value=action, constraints=[f"one of {', '.join(ACTIONS)}"])

    @staticmethod
    def _parse_limit(value: Any) -> int:
        if value is None:
            return DEFAULT_LIMIT
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= MAX_LIMIT:
            raise ValidationError(
                f"Limit must be an integer between 1 and {MAX_LIMIT}",
                field="limit",
                value=value,
            )
        return value

    @staticmethod
    def _parse_game_id(value: Any) -> int:
        if value is None or value == "":
            raise ValidationError("Game ID is required", field="gameId")
        text = str(value).strip()
        if isinstance(value, bool) or not (text.isascii() and text.isdigit()):
            raise ValidationError("Game ID must be numeric", field="gameId", value=value)
        return int(text)
