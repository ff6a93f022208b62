"""Client for the IGDB game database.

Queries are POSTed as Apicalypse text bodies and authenticated with a
Twitch app-access token obtained through the client-credentials flow.
Every high-level lookup goes through the response cache first, then the
rate limiter, then the network.
"""

from typing import Any

import httpx
import structlog

from ..models.config import AppConfig
from ..models.game import GameRecord
from ..models.resolution import AccessToken
from .cache import cache_key
from .errors import AuthError, RateLimitError, UpstreamError
from .http_client import HttpClientService
from .state import UpstreamState

log = structlog.stdlib.get_logger()

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
API_URL = "https://api.igdb.com/v4"
# Tokens are renewed this many seconds before upstream expiry
TOKEN_SAFETY_MARGIN = 60.0

GAME_FIELDS = (
    "name, slug, cover.image_id, first_release_date, rating, rating_count, "
    "platforms.name, genres.name, summary"
)
SIMILAR_FIELDS = (
    "similar_games.name, similar_games.slug, similar_games.cover.image_id, "
    "similar_games.first_release_date, similar_games.rating"
)
SLUG_FIELDS = f"{GAME_FIELDS}, screenshots.image_id, {SIMILAR_FIELDS}"
DETAIL_FIELDS = (
    f"{SLUG_FIELDS}, involved_companies.company.name, involved_companies.developer, "
    "involved_companies.publisher, websites.category, websites.url"
)


def escape_query_text(text: str) -> str:
    """Escape user text for embedding in a double-quoted Apicalypse string."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


class IGDBClient:
    """Authenticated, rate-limited and cached access to the game database."""

    def __init__(
        self,
        http_client: HttpClientService,
        client_id: str,
        client_secret: str,
        state: UpstreamState | None = None,
        token_url: str = TOKEN_URL,
        api_url: str = API_URL,
        min_rating_count: int = 10,
    ) -> None:
        self._http = http_client
        self._client_id = client_id
        self._client_secret = client_secret
        self.state = state or UpstreamState()
        self._token_url = token_url
        self._api_url = api_url.rstrip("/")
        self.min_rating_count = min_rating_count

        log.info("Game database client initialized", api_url=self._api_url, min_rating_count=min_rating_count)

    @classmethod
    def from_config(cls, config: AppConfig, http_client: HttpClientService, state: UpstreamState) -> "IGDBClient":
        return cls(
            http_client=http_client,
            client_id=config.client_id,
            client_secret=config.client_secret,
            state=state,
            token_url=config.token_url,
            api_url=config.api_url,
            min_rating_count=config.min_rating_count,
        )

    async def get_access_token(self) -> str:
        """Return a valid bearer token, renewing it when expired.

        Raises:
            AuthError: If credentials are missing or the exchange fails. The
                cached token is left unset so the next call tries again.
        """
        now = self.state.clock()
        token = self.state.token
        if token is not None and token.is_valid(now):
            return token.token

        if not self._client_id or not self._client_secret:
            raise AuthError("Client credentials are not configured")

        log.info("Renewing access token")
        self.state.token = None

        try:
            response = await self._http.post(
                self._token_url,
                json={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.RequestError as e:
            raise AuthError("Failed to get access token", original_error=e) from e

        if not response.is_success:
            log.error("Token request failed", status_code=response.status_code)
            raise AuthError(f"Token request failed: {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
            access_token = str(data["access_token"])
            expires_in = float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError("Malformed token response", status_code=response.status_code, original_error=e) from e

        self.state.token = AccessToken(token=access_token, expires_at=now + expires_in - TOKEN_SAFETY_MARGIN)
        log.info("New access token acquired", expires_in=expires_in)
        return access_token

    def check_rate_limit(self, identifier: str) -> bool:
        return self.state.rate_limiter.check(identifier)

    async def request(self, query_body: str, identifier: str = "default") -> list[dict[str, Any]]:
        """POST a raw query to the games endpoint.

        Args:
            query_body: Apicalypse query text
            identifier: Rate-limit bucket for this request

        Returns:
            The decoded JSON rows

        Raises:
            RateLimitError: If the bucket for ``identifier`` is exhausted
            AuthError: If no token can be obtained
            UpstreamError: On a non-2xx answer, transport failure or bad payload
        """
        if not self.check_rate_limit(identifier):
            limiter = self.state.rate_limiter
            raise RateLimitError(identifier, limiter.max_requests, limiter.window)

        token = await self.get_access_token()
        url = f"{self._api_url}/games"

        try:
            response = await self._http.post(
                url,
                content=query_body,
                headers={
                    "Client-ID": self._client_id,
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "text/plain",
                },
            )
        except httpx.RequestError as e:
            raise UpstreamError("Game database temporarily unavailable", original_error=e) from e

        if not response.is_success:
            log.error(
                "Game database error",
                status_code=response.status_code,
                body=response.text[:500],
                identifier=identifier,
            )
            raise UpstreamError(
                f"IGDB API error: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            rows = response.json()
        except ValueError as e:
            raise UpstreamError("Invalid JSON from game database", status_code=response.status_code, original_error=e) from e

        if not isinstance(rows, list):
            raise UpstreamError(
                "Unexpected response from game database",
                status_code=response.status_code,
                body=response.text,
            )
        return rows

    async def search_games(self, query: str, limit: int = 20) -> list[GameRecord]:
        """Text search restricted to games with a cover and enough ratings.

        Falls back to a name-contains match when the search index finds
        nothing. Results are ordered by rating count, highest first.
        """
        key = cache_key("search", f"{query}:limit-{limit}")
        cached = self.state.response_cache.lookup(key)
        if cached is not None:
            return list(cached.payload)

        text = escape_query_text(query)
        quality = self._quality_filter()

        rows = await self.request(
            f'search "{text}"; fields {GAME_FIELDS}; where {quality}; limit {limit};',
            key,
        )
        if not rows:
            log.info("Search returned nothing, trying name match", query=query)
            rows = await self.request(
                f'fields {GAME_FIELDS}; where name ~ *"{text}"* & {quality}; limit {limit};',
                key,
            )

        games = sorted(self._parse_rows(rows), key=lambda g: g.rating_count or 0, reverse=True)
        self.state.response_cache.set(key, tuple(games))
        log.info("Search completed", query=query, results=len(games))
        return games

    async def get_popular_games(self, limit: int = 20) -> list[GameRecord]:
        """Most-rated games passing the quality filter."""
        key = cache_key("popular", f"limit-{limit}")
        cached = self.state.response_cache.lookup(key)
        if cached is not None:
            return list(cached.payload)

        rows = await self.request(
            f"fields {GAME_FIELDS}; where {self._quality_filter()}; sort rating_count desc; limit {limit};",
            key,
        )
        games = self._parse_rows(rows)
        self.state.response_cache.set(key, tuple(games))
        return games

    async def get_game_details(self, game_id: int | str) -> GameRecord | None:
        """Full record for a numeric id, or None when it does not exist."""
        numeric_id = int(game_id)
        key = cache_key("details", str(numeric_id))
        cached = self.state.response_cache.lookup(key)
        if cached is not None:
            return cached.payload

        rows = await self.request(f"fields {DETAIL_FIELDS}; where id = {numeric_id};", key)
        game = self._first(rows)
        self.state.response_cache.set(key, game)
        return game

    async def get_game_by_slug(self, slug: str) -> GameRecord | None:
        """Record whose stored slug equals ``slug`` exactly."""
        key = cache_key("slug", slug)
        cached = self.state.response_cache.lookup(key)
        if cached is not None:
            return cached.payload

        rows = await self.request(
            f'fields {SLUG_FIELDS}; where slug = "{escape_query_text(slug)}";',
            key,
        )
        game = self._first(rows)
        self.state.response_cache.set(key, game)
        log.debug("Exact slug lookup", slug=slug, found=game is not None)
        return game

    def _quality_filter(self) -> str:
        return f"cover != null & rating_count >= {self.min_rating_count}"

    def _first(self, rows: list[dict[str, Any]]) -> GameRecord | None:
        games = self._parse_rows(rows[:1])
        return games[0] if games else None

    @staticmethod
    def _parse_rows(rows: list[dict[str, Any]]) -> list[GameRecord]:
        games = []
        for row in rows:
            if not isinstance(row, dict) or not _is_game_id(row.get("id")):
                log.warning("Skipping malformed game row", row=str(row)[:200])
                continue
            games.append(GameRecord.from_api(row))
        return games


def _is_game_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
