"""Configuration service for managing application settings."""

import json
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import structlog

from ..models import AppConfig
from .errors import ConfigurationError

log = structlog.stdlib.get_logger()

CLIENT_ID_ENV = "TWITCH_CLIENT_ID"
CLIENT_SECRET_ENV = "TWITCH_CLIENT_SECRET"
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Service for managing application configuration.

    Settings come from a JSON file; the Twitch credentials may also be
    supplied through ``TWITCH_CLIENT_ID`` and ``TWITCH_CLIENT_SECRET``, which
    take precedence over the file.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or Path.home() / ".config" / "gamedex" / "config.json"
        log.info("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return self._apply_environment(self._get_default_config())

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)

            config = self._apply_environment(self._dict_to_config(data))
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
                return self._apply_environment(self._get_default_config())

            log.info("Configuration loaded successfully")
            return config

        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self._apply_environment(self._get_default_config())

    def save_config(self, config: AppConfig) -> None:
        """Save configuration to file."""
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ConfigurationError(
                f"Invalid configuration: {', '.join(validation_result.errors)}",
                expected="; ".join(validation_result.errors),
            )

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            data = self._config_to_dict(config)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            log.info("Configuration saved successfully")

        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        for name in ("token_url", "api_url"):
            value = getattr(config, name)
            if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                errors.append(f"{name} must be an http(s) URL")

        if not isinstance(config.collection_path, Path):
            errors.append("collection_path must be a Path object")

        for name in (
            "request_timeout",
            "search_timeout",
            "rate_limit_window",
            "cache_ttl",
            "popular_cache_ttl",
            "resolution_cache_ttl",
        ):
            value = getattr(config, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(f"{name} must be a positive number")

        if isinstance(config.rate_limit_max_requests, bool) or not isinstance(config.rate_limit_max_requests, int) \
                or config.rate_limit_max_requests < 1:
            errors.append("rate_limit_max_requests must be a positive integer")

        if isinstance(config.min_rating_count, bool) or not isinstance(config.min_rating_count, int) \
                or config.min_rating_count < 0:
            errors.append("min_rating_count must be a non-negative integer")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}")

        return ValidationResult(len(errors) == 0, errors)

    def _get_default_config(self) -> AppConfig:
        """Get default configuration."""
        return AppConfig(
            client_id="",
            client_secret="",
            collection_path=Path.home() / ".local" / "share" / "gamedex" / "collection.json",
        )

    @staticmethod
    def _apply_environment(config: AppConfig) -> AppConfig:
        overrides = {}
        client_id = os.getenv(CLIENT_ID_ENV)
        client_secret = os.getenv(CLIENT_SECRET_ENV)
        if client_id:
            overrides["client_id"] = client_id
        if client_secret:
            overrides["client_secret"] = client_secret
        return replace(config, **overrides) if overrides else config

    def _config_to_dict(self, config: AppConfig) -> dict[str, Any]:
        """Convert AppConfig to dictionary for JSON serialization."""
        return {
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "collection_path": str(config.collection_path),
            "token_url": config.token_url,
            "api_url": config.api_url,
            "request_timeout": config.request_timeout,
            "search_timeout": config.search_timeout,
            "rate_limit_window": config.rate_limit_window,
            "rate_limit_max_requests": config.rate_limit_max_requests,
            "cache_ttl": config.cache_ttl,
            "popular_cache_ttl": config.popular_cache_ttl,
            "resolution_cache_ttl": config.resolution_cache_ttl,
            "min_rating_count": config.min_rating_count,
            "log_level": config.log_level,
        }

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig, keeping defaults for missing keys."""
        defaults = self._get_default_config()

        def number(name: str) -> float:
            raw = data.get(name, getattr(defaults, name))
            return float(raw) if isinstance(raw, (int, float)) and not isinstance(raw, bool) else getattr(defaults, name)

        def integer(name: str) -> int:
            raw = data.get(name, getattr(defaults, name))
            return int(raw) if isinstance(raw, (int, float)) and not isinstance(raw, bool) else getattr(defaults, name)

        collection_raw = data.get("collection_path")
        collection_path = Path(str(collection_raw)).expanduser() if collection_raw else defaults.collection_path

        return AppConfig(
            client_id=str(data.get("client_id") or ""),
            client_secret=str(data.get("client_secret") or ""),
            collection_path=collection_path,
            token_url=str(data.get("token_url", defaults.token_url)),
            api_url=str(data.get("api_url", defaults.api_url)),
            request_timeout=number("request_timeout"),
            search_timeout=number("search_timeout"),
            rate_limit_window=number("rate_limit_window"),
            rate_limit_max_requests=integer("rate_limit_max_requests"),
            cache_ttl=number("cache_ttl"),
            popular_cache_ttl=number("popular_cache_ttl"),
            resolution_cache_ttl=number("resolution_cache_ttl"),
            min_rating_count=integer("min_rating_count"),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
        )
