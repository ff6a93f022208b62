"""Command-line entry point for gamedex.

This module provides:
- Command-line argument parsing
- Application initialization and dependency injection
- JSON output of API responses on stdout
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import structlog

from gamedex import __version__
from gamedex.models import AppConfig, CollectionSort, format_rating, release_year
from gamedex.services.api import ApiResponse, GameApiService
from gamedex.services.collection import CollectionService
from gamedex.services.config import ConfigurationService
from gamedex.services.errors import get_error_service, handle_error
from gamedex.services.http_client import HttpClientService
from gamedex.services.igdb_client import IGDBClient
from gamedex.services.logging import setup_logging
from gamedex.services.resolver import GameResolver
from gamedex.services.state import UpstreamState
from gamedex.services.strategies import default_strategies

log = structlog.stdlib.get_logger()


class ApplicationContext:
    """Container for application services and state.

    Services are created lazily and share one UpstreamState, so the token,
    rate-limit counters and caches are process-wide.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path: Path | None = config_path

        self._config_service: ConfigurationService | None = None
        self._config: AppConfig | None = None
        self._state: UpstreamState | None = None
        self._http_client: HttpClientService | None = None
        self._igdb_client: IGDBClient | None = None
        self._collection: CollectionService | None = None
        self._resolver: GameResolver | None = None
        self._api: GameApiService | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def state(self) -> UpstreamState:
        if self._state is None:
            self._state = UpstreamState.from_config(self.config)
        return self._state

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(timeout=self.config.request_timeout)
        return self._http_client

    @property
    def igdb_client(self) -> IGDBClient:
        if self._igdb_client is None:
            self._igdb_client = IGDBClient.from_config(self.config, self.http_client, self.state)
        return self._igdb_client

    @property
    def collection(self) -> CollectionService:
        if self._collection is None:
            self._collection = CollectionService(self.config.collection_path)
        return self._collection

    @property
    def resolver(self) -> GameResolver:
        if self._resolver is None:
            self._resolver = GameResolver(
                default_strategies(self.igdb_client, local_lookup=self.collection.get_by_slug),
                self.state.resolution_cache,
            )
        return self._resolver

    @property
    def api(self) -> GameApiService:
        if self._api is None:
            self._api = GameApiService(
                self.igdb_client,
                self.resolver,
                self.state,
                search_timeout=self.config.search_timeout,
            )
        return self._api

    async def cleanup(self) -> None:
        """Close network connections."""
        if self._http_client is not None:
            await self._http_client.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gamedex",
        description="Search the IGDB game database and manage a local game collection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gamedex search "zelda"              Search for games
  gamedex slug final-fantasy-vii      Resolve a slug to one game
  gamedex collection add hades        Save a game to the collection
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/gamedex/config.json)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: from configuration)",
    )
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")

    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search games by text")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None)

    popular = commands.add_parser("popular", help="List popular games")
    popular.add_argument("--limit", type=int, default=None)

    details = commands.add_parser("details", help="Show a game by numeric id")
    details.add_argument("game_id")

    slug = commands.add_parser("slug", help="Resolve a slug or generated game-<id> to one game")
    slug.add_argument("slug")

    commands.add_parser("health", help="Show cache and rate-limit statistics")

    collection = commands.add_parser("collection", help="Manage the local collection")
    collection_commands = collection.add_subparsers(dest="collection_command", required=True)
    listing = collection_commands.add_parser("list", help="List collected games")
    listing.add_argument(
        "--sort",
        choices=[s.value for s in CollectionSort],
        default=CollectionSort.DATE_ADDED.value,
    )
    add = collection_commands.add_parser("add", help="Resolve a slug and add it to the collection")
    add.add_argument("slug")
    remove = collection_commands.add_parser("remove", help="Remove a game by id")
    remove.add_argument("game_id", type=int)

    return parser


def request_payload(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed arguments into an API action payload."""
    payload: dict[str, Any] = {"action": args.command}
    if args.command == "search":
        payload["query"] = args.query
    elif args.command == "details":
        payload["gameId"] = args.game_id
    elif args.command == "slug":
        payload["slug"] = args.slug
    if getattr(args, "limit", None) is not None:
        payload["limit"] = args.limit
    return payload


def emit(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def emit_response(response: ApiResponse) -> int:
    output: dict[str, Any] = {"status": response.status, "data": response.body}
    if response.strategy is not None:
        output["strategy"] = response.strategy
    emit(output)
    return 0 if response.ok else 1


async def run_collection_command(context: ApplicationContext, args: argparse.Namespace) -> int:
    collection = context.collection

    if args.collection_command == "list":
        entries = collection.list_games(CollectionSort(args.sort))
        emit([
            {
                "id": entry.game.id,
                "slug": entry.game.slug,
                "name": entry.game.name,
                "rating": format_rating(entry.game.rating),
                "year": release_year(entry.game.first_release_date),
                "added_at": entry.added_at,
            }
            for entry in entries
        ])
        return 0

    if args.collection_command == "add":
        result = await context.resolver.resolve(args.slug)
        if result.game is None:
            return emit_response(ApiResponse(status=404, body={"error": "Game not found"}))
        added = collection.add_game(result.game)
        emit({"added": added, "id": result.game.id, "name": result.game.name})
        return 0

    removed = collection.remove_game(args.game_id)
    emit({"removed": removed, "id": args.game_id})
    return 0 if removed else 1


async def run_command(context: ApplicationContext, args: argparse.Namespace) -> int:
    """Run one command and return the exit code."""
    try:
        if args.command == "health":
            emit(context.api.health())
            return 0
        if args.command == "collection":
            return await run_collection_command(context, args)
        return emit_response(await context.api.handle(request_payload(args)))
    finally:
        await context.cleanup()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    context = ApplicationContext(config_path=args.config)

    # Configure before the config file is read so nothing is logged to stdout
    setup_logging(log_level=args.log_level or "INFO", log_dir=args.log_dir)
    if args.log_level is None and context.config.log_level != "INFO":
        setup_logging(log_level=context.config.log_level, log_dir=args.log_dir)
    log.info("Starting gamedex", version=__version__, command=args.command)

    try:
        exit_code = asyncio.run(run_command(context, args))
    except KeyboardInterrupt:
        log.info("Interrupted by user")
        exit_code = 130
    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        friendly = handle_error(e, operation=args.command, component="cli")
        print(get_error_service().create_user_message(friendly), file=sys.stderr)
        exit_code = 1

    log.info("Exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
