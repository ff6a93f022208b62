"""Data models for the gamedex application."""

from .collection import CollectionEntry, CollectionSort
from .config import AppConfig
from .game import Company, GameRecord, Image, NamedRef, Website, format_rating, release_year
from .resolution import AccessToken, CacheEntry, RateLimitCounter, ResolutionResult

__all__ = [
    "AccessToken",
    "AppConfig",
    "CacheEntry",
    "CollectionEntry",
    "CollectionSort",
    "Company",
    "GameRecord",
    "Image",
    "NamedRef",
    "RateLimitCounter",
    "ResolutionResult",
    "Website",
    "format_rating",
    "release_year",
]
