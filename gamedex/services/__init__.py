"""Service layer for game lookup, caching and the local collection."""

from .api import ApiResponse, GameApiService
from .cache import CachePolicy, TTLCache, cache_key
from .collection import CollectionService
from .config import ConfigurationService, ValidationResult
from .errors import (
    AppError,
    AuthError,
    ConfigurationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    RateLimitError,
    UpstreamError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .http_client import HttpClientService
from .igdb_client import IGDBClient
from .matching import calculate_match_score, find_best_match, slug_to_name
from .rate_limiter import RateLimiter
from .resolver import GameResolver
from .state import UpstreamState
from .strategies import (
    ExactSlugStrategy,
    GameSearchStrategy,
    IDSearchStrategy,
    LocalCacheStrategy,
    NameSearchStrategy,
    default_strategies,
)

__all__ = [
    "ApiResponse",
    "AppError",
    "AuthError",
    "CachePolicy",
    "CollectionService",
    "ConfigurationError",
    "ConfigurationService",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "ExactSlugStrategy",
    "GameApiService",
    "GameResolver",
    "GameSearchStrategy",
    "HttpClientService",
    "IDSearchStrategy",
    "IGDBClient",
    "LocalCacheStrategy",
    "NameSearchStrategy",
    "RateLimitError",
    "RateLimiter",
    "TTLCache",
    "UpstreamError",
    "UpstreamState",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "cache_key",
    "calculate_match_score",
    "default_strategies",
    "find_best_match",
    "get_error_service",
    "handle_error",
    "slug_to_name",
]
