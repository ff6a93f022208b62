"""Tests for game record parsing and display helpers."""

from gamedex.models.game import GameRecord, format_rating, image_url, release_year

from tests.fakes import SAMPLE_GAMES


class TestGameRecord:
    """Normalization of upstream payloads."""

    def test_missing_slug_is_generated_from_id(self) -> None:
        game = GameRecord.from_api({"id": 5555, "name": "Obscure Prototype"})

        assert game.slug == "game-5555"

    def test_empty_slug_is_generated_from_id(self) -> None:
        assert GameRecord.from_api({"id": 7, "slug": "", "name": "Blank"}).slug == "game-7"

    def test_image_urls_use_cdn_sizes(self) -> None:
        game = GameRecord.from_api(
            {
                "id": 1,
                "name": "Pictures",
                "cover": {"id": 10, "image_id": "abc"},
                "screenshots": [{"image_id": "s1"}, {"id": 3}],
            }
        )

        assert game.cover is not None
        assert game.cover.url == "https://images.igdb.com/igdb/image/upload/t_cover_big/abc.jpg"
        assert [s.url for s in game.screenshots] == [
            "https://images.igdb.com/igdb/image/upload/t_screenshot_big/s1.jpg"
        ]

    def test_similar_games_are_normalized(self) -> None:
        game = GameRecord.from_api(
            {
                "id": 1,
                "name": "Original",
                "similar_games": [{"id": 2, "name": "Clone", "cover": {"image_id": "c2"}}, 3],
            }
        )

        assert len(game.similar_games) == 1
        similar = game.similar_games[0]
        assert similar.slug == "game-2"
        assert similar.cover is not None
        assert similar.cover.url == image_url("c2")

    def test_companies_and_websites(self) -> None:
        game = GameRecord.from_api(
            {
                "id": 1,
                "name": "Made",
                "involved_companies": [
                    {"company": {"name": "Studio"}, "developer": True, "publisher": False},
                    {"company": 99, "publisher": True},
                ],
                "websites": [{"url": "https://example.com", "category": 1}, {"category": 2}],
            }
        )

        assert game.involved_companies[0].name == "Studio"
        assert game.involved_companies[0].developer
        assert game.involved_companies[1].name == "99"
        assert game.involved_companies[1].publisher
        assert [w.url for w in game.websites] == ["https://example.com"]

    def test_bad_numbers_become_none(self) -> None:
        game = GameRecord.from_api({"id": "12", "name": "Odd", "rating": "n/a", "rating_count": None})

        assert game.id == 12
        assert game.rating is None
        assert game.rating_count is None

    def test_serialized_record_reads_back_unchanged(self) -> None:
        for row in SAMPLE_GAMES:
            game = GameRecord.from_api(row)

            assert GameRecord.from_api(game.to_dict()) == game

    def test_to_dict_omits_missing_fields(self) -> None:
        data = GameRecord(id=1, slug="bare", name="Bare").to_dict()

        assert data == {"id": 1, "slug": "bare", "name": "Bare"}


class TestDisplayHelpers:
    """Rating and release-year formatting."""

    def test_format_rating(self) -> None:
        assert format_rating(80.5) == "80/100"
        assert format_rating(92.7) == "93/100"
        assert format_rating(None) == "N/A"
        assert format_rating(0) == "N/A"

    def test_release_year(self) -> None:
        assert release_year(509328000) == "1986"
        assert release_year(None) == "Unknown"
        assert release_year(0) == "Unknown"
