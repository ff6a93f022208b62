"""Game-related data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

IMAGE_BASE_URL = "https://images.igdb.com/igdb/image/upload"


def image_url(image_id: str, size: str = "cover_big") -> str:
    """Build the CDN URL for an upstream image id."""
    return f"{IMAGE_BASE_URL}/t_{size}/{image_id}.jpg"


@dataclass(frozen=True)
class Image:
    """Cover or screenshot reference."""
    image_id: str
    url: str


@dataclass(frozen=True)
class NamedRef:
    """Platform or genre reference."""
    id: int | None
    name: str


@dataclass(frozen=True)
class Company:
    """Company involved in a game."""
    name: str
    developer: bool = False
    publisher: bool = False


@dataclass(frozen=True)
class Website:
    """External website for a game."""
    url: str
    category: int | None = None


@dataclass(frozen=True)
class GameRecord:
    """Canonical game record as returned by the game database."""
    id: int
    slug: str
    name: str
    cover: Image | None = None
    first_release_date: int | None = None  # unix seconds
    rating: float | None = None  # 0-100 scale
    rating_count: int | None = None
    platforms: tuple[NamedRef, ...] = ()
    genres: tuple[NamedRef, ...] = ()
    summary: str | None = None
    screenshots: tuple[Image, ...] = ()
    similar_games: tuple["GameRecord", ...] = ()
    involved_companies: tuple[Company, ...] = ()
    websites: tuple[Website, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "GameRecord":
        """Build a record from an upstream (or previously serialized) payload.

        Missing slugs are synthesized as ``game-<id>`` and image URLs are
        rewritten to the CDN template, so every record leaving the client
        has the same shape.
        """
        game_id = int(data["id"])
        slug = data.get("slug") or f"game-{game_id}"

        return cls(
            id=game_id,
            slug=slug,
            name=str(data.get("name") or slug),
            cover=_parse_image(data.get("cover"), "cover_big"),
            first_release_date=_optional_int(data.get("first_release_date")),
            rating=_optional_float(data.get("rating")),
            rating_count=_optional_int(data.get("rating_count")),
            platforms=_parse_refs(data.get("platforms")),
            genres=_parse_refs(data.get("genres")),
            summary=data.get("summary"),
            screenshots=tuple(
                image
                for image in (_parse_image(s, "screenshot_big") for s in data.get("screenshots") or [])
                if image is not None
            ),
            similar_games=tuple(
                cls.from_api(g)
                for g in data.get("similar_games") or []
                if isinstance(g, dict) and isinstance(g.get("id"), int)
            ),
            involved_companies=tuple(
                _parse_company(c) for c in data.get("involved_companies") or [] if isinstance(c, dict)
            ),
            websites=tuple(
                Website(url=str(w["url"]), category=_optional_int(w.get("category")))
                for w in data.get("websites") or []
                if isinstance(w, dict) and w.get("url")
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the upstream-shaped dictionary ``from_api`` accepts."""
        data: dict[str, Any] = {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
        }
        if self.cover is not None:
            data["cover"] = {"image_id": self.cover.image_id, "url": self.cover.url}
        if self.first_release_date is not None:
            data["first_release_date"] = self.first_release_date
        if self.rating is not None:
            data["rating"] = self.rating
        if self.rating_count is not None:
            data["rating_count"] = self.rating_count
        if self.platforms:
            data["platforms"] = [{"id": p.id, "name": p.name} for p in self.platforms]
        if self.genres:
            data["genres"] = [{"id": g.id, "name": g.name} for g in self.genres]
        if self.summary is not None:
            data["summary"] = self.summary
        if self.screenshots:
            data["screenshots"] = [{"image_id": s.image_id, "url": s.url} for s in self.screenshots]
        if self.similar_games:
            data["similar_games"] = [g.to_dict() for g in self.similar_games]
        if self.involved_companies:
            data["involved_companies"] = [
                {"company": {"name": c.name}, "developer": c.developer, "publisher": c.publisher}
                for c in self.involved_companies
            ]
        if self.websites:
            data["websites"] = [{"url": w.url, "category": w.category} for w in self.websites]
        return data


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_image(data: Any, size: str) -> Image | None:
    if not isinstance(data, dict) or not data.get("image_id"):
        return None
    image_id = str(data["image_id"])
    return Image(image_id=image_id, url=image_url(image_id, size))


def _parse_refs(items: Any) -> tuple[NamedRef, ...]:
    refs = []
    for item in items or []:
        if isinstance(item, dict) and item.get("name"):
            refs.append(NamedRef(id=_optional_int(item.get("id")), name=str(item["name"])))
    return tuple(refs)


def _parse_company(data: dict[str, Any]) -> Company:
    company = data.get("company")
    # Upstream expands company to an object; a bare id means it was not expanded
    name = company.get("name", "") if isinstance(company, dict) else str(company or "")
    return Company(
        name=name,
        developer=bool(data.get("developer", False)),
        publisher=bool(data.get("publisher", False)),
    )


def format_rating(rating: float | None) -> str:
    """Format a 0-100 rating for display, ``N/A`` when missing or zero."""
    if not rating:
        return "N/A"
    return f"{round(rating)}/100"


def release_year(timestamp: int | None) -> str:
    """Extract the release year from a unix timestamp."""
    if not timestamp:
        return "Unknown"
    return str(datetime.fromtimestamp(timestamp, tz=timezone.utc).year)
