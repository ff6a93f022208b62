"""Slug-to-title conversion and candidate scoring for name searches."""

import re
import time
from collections.abc import Sequence

from ..models.game import GameRecord

ROMAN_NUMERALS: dict[str, str] = {
    "i": "I",
    "ii": "II",
    "iii": "III",
    "iv": "IV",
    "v": "V",
    "vi": "VI",
    "vii": "VII",
    "viii": "VIII",
    "ix": "IX",
    "x": "X",
    "xi": "XI",
    "xii": "XII",
}

# Compound names whose hyphen is lost when a slug is split
_COMPOUND_FIXES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bAll Stars\b", re.IGNORECASE), "All-Stars"),
]

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

EXACT_NAME_BONUS = 100.0
NAME_CONTAINS_BONUS = 50.0
EXACT_SLUG_BONUS = 200.0
RECENCY_YEARS = 20.0


def slug_to_name(slug: str) -> str:
    """Turn a hyphenated slug into a display title.

    >>> slug_to_name("final-fantasy-vii")
    'Final Fantasy VII'
    """
    words = []
    for word in slug.split("-"):
        if word in ROMAN_NUMERALS:
            words.append(ROMAN_NUMERALS[word])
        else:
            words.append(word[:1].upper() + word[1:])

    title = " ".join(words)
    for pattern, replacement in _COMPOUND_FIXES:
        title = pattern.sub(replacement, title)
    return title


def calculate_match_score(
    game: GameRecord,
    name: str,
    original_slug: str,
    now: float | None = None,
) -> float:
    """Score how well ``game`` answers a lookup for ``name``/``original_slug``.

    An exact slug match alone outweighs every other bonus combined.
    """
    if now is None:
        now = time.time()

    score = 0.0
    game_name = game.name.lower()
    wanted = name.lower()

    if game_name == wanted:
        score += EXACT_NAME_BONUS
    if wanted in game_name:
        score += NAME_CONTAINS_BONUS
    if game.slug == original_slug:
        score += EXACT_SLUG_BONUS
    if game.rating is not None:
        score += game.rating / 10
    if game.first_release_date is not None:
        # Unreleased games count as released today
        years_since_release = max(0.0, (now - game.first_release_date) / SECONDS_PER_YEAR)
        score += max(0.0, RECENCY_YEARS - years_since_release)

    return score


def find_best_match(
    games: Sequence[GameRecord],
    name: str,
    original_slug: str,
    now: float | None = None,
) -> GameRecord | None:
    """Highest scoring candidate; the earliest one wins a tie."""
    if now is None:
        now = time.time()

    best: GameRecord | None = None
    best_score = float("-inf")
    for game in games:
        score = calculate_match_score(game, name, original_slug, now)
        if score > best_score:
            best, best_score = game, score
    return best
