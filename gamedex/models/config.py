"""Configuration data models."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    client_id: str
    client_secret: str
    collection_path: Path
    token_url: str = "https://id.twitch.tv/oauth2/token"
    api_url: str = "https://api.igdb.com/v4"
    request_timeout: float = 30.0
    search_timeout: float = 10.0  # Dispatcher-level cap on search requests
    rate_limit_window: float = 60.0
    rate_limit_max_requests: int = 50
    cache_ttl: float = 300.0
    popular_cache_ttl: float = 1800.0  # Popular list changes slowly
    resolution_cache_ttl: float = 300.0
    min_rating_count: int = 10  # Quality filter for search and popular lists
    log_level: str = "INFO"
