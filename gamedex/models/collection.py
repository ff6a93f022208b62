"""Local collection data models."""

from dataclasses import dataclass
from enum import Enum

from .game import GameRecord


class CollectionSort(Enum):
    """Orderings available when listing the collection."""
    DATE_ADDED = "date_added"
    RELEASE_DATE = "release_date"
    NAME = "name"


@dataclass(frozen=True)
class CollectionEntry:
    """A game saved to the local collection."""
    game: GameRecord
    added_at: float  # unix seconds
