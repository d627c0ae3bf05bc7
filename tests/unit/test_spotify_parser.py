"""Unit tests for Web API JSON parsing."""

from __future__ import annotations

from offline_player.models import Playlist, Track
from offline_player.spotify.parser import parse_playlist_page, parse_track_item, parse_track_page


def _item(track_id: str | None = "t1", **overrides: object) -> dict:
    track = {
        "id": track_id,
        "name": "Blue Monday",
        "artists": [{"name": "New Order"}],
        "duration_ms": 449000,
        "external_ids": {"isrc": "GBAAA8300001"},
    }
    track.update(overrides)
    return {"added_at": "2024-01-01T00:00:00Z", "track": track}


class TestParseTrackItem:
    def test_full_item(self) -> None:
        assert parse_track_item(_item()) == Track(
            id="t1",
            name="Blue Monday",
            artists="New Order",
            duration_ms=449000,
            isrc="GBAAA8300001",
        )

    def test_multiple_artists_joined(self) -> None:
        track = parse_track_item(
            _item(artists=[{"name": "Daft Punk"}, {"name": "Pharrell Williams"}, {}])
        )
        assert track is not None
        assert track.artists == "Daft Punk, Pharrell Williams"

    def test_missing_isrc(self) -> None:
        track = parse_track_item(_item(external_ids={}))
        assert track is not None
        assert track.isrc is None

    def test_removed_track_skipped(self) -> None:
        assert parse_track_item({"track": None}) is None

    def test_local_file_without_id_skipped(self) -> None:
        assert parse_track_item(_item(track_id=None, is_local=True)) is None


class TestParsePages:
    def test_track_page_keeps_order_and_drops_empty(self) -> None:
        page = {"items": [_item("a"), {"track": None}, _item("b")], "next": None}
        assert [t.id for t in parse_track_page(page)] == ["a", "b"]

    def test_empty_page(self) -> None:
        assert parse_track_page({}) == []
        assert parse_playlist_page({"items": None}) == []

    def test_playlist_page(self) -> None:
        page = {
            "items": [
                {"id": "p1", "name": "Mix", "tracks": {"href": "https://x/p1/tracks"}},
                {"name": "no id"},
                None,
            ]
        }
        assert parse_playlist_page(page) == [Playlist("p1", "Mix", "https://x/p1/tracks")]
