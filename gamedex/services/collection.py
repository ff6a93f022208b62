"""Persistent local collection of saved games."""

import json
import time
from collections.abc import Callable
from pathlib import Path

import structlog

from ..models.collection import CollectionEntry, CollectionSort
from ..models.game import GameRecord

log = structlog.stdlib.get_logger()


class CollectionService:
    """Keyed list of saved games stored as a JSON file.

    Games are keyed by id; adding a game that is already present is a no-op.
    """

    def __init__(self, path: Path, clock: Callable[[], float] = time.time) -> None:
        self.path = path
        self._clock = clock
        self._entries: list[CollectionEntry] | None = None
        log.info("Collection service initialized", path=str(self.path))

    @property
    def entries(self) -> list[CollectionEntry]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def add_game(self, game: GameRecord) -> bool:
        """Save a game; returns False when it was already collected."""
        if self.is_collected(game.id):
            log.debug("Game already in collection", game_id=game.id)
            return False
        entries = [*self.entries, CollectionEntry(game=game, added_at=self._clock())]
        self._save(entries)
        self._entries = entries
        log.info("Game added to collection", game_id=game.id, name=game.name)
        return True

    def remove_game(self, game_id: int) -> bool:
        """Drop a game; returns False when it was not collected."""
        remaining = [entry for entry in self.entries if entry.game.id != game_id]
        if len(remaining) == len(self.entries):
            return False
        self._save(remaining)
        self._entries = remaining
        log.info("Game removed from collection", game_id=game_id)
        return True

    def is_collected(self, game_id: int) -> bool:
        return any(entry.game.id == game_id for entry in self.entries)

    def get_by_slug(self, slug: str) -> GameRecord | None:
        for entry in self.entries:
            if entry.game.slug == slug:
                return entry.game
        return None

    def list_games(self, sort_by: CollectionSort = CollectionSort.DATE_ADDED) -> list[CollectionEntry]:
        """Collected games, newest first for dates and A-Z for names."""
        if sort_by is CollectionSort.NAME:
            return sorted(self.entries, key=lambda e: e.game.name.lower())
        if sort_by is CollectionSort.RELEASE_DATE:
            return sorted(self.entries, key=lambda e: e.game.first_release_date or 0, reverse=True)
        return sorted(self.entries, key=lambda e: e.added_at, reverse=True)

    def clear(self) -> None:
        self._save([])
        self._entries = []

    def _load(self) -> list[CollectionEntry]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            entries = [
                CollectionEntry(game=GameRecord.from_api(item["game"]), added_at=float(item["added_at"]))
                for item in data.get("games", [])
            ]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            log.error("Failed to load collection, starting empty", path=str(self.path), error=str(e))
            return []

        log.info("Collection loaded", games=len(entries))
        return entries

    def _save(self, entries: list[CollectionEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "games": [
                {"game": entry.game.to_dict(), "added_at": entry.added_at}
                for entry in entries
            ]
        }
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            log.error("Failed to save collection", path=str(self.path), error=str(e))
            raise
