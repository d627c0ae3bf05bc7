"""Unit tests for auto-match runs."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from offline_player.attach import AutoMatchRun
from offline_player.exceptions import (
    InvalidMatchMode,
    MatchCancelled,
    NetworkFetchFailure,
    StorageWriteFailure,
)
from offline_player.matching.engine import MatchMode
from offline_player.models import Track
from offline_player.store.blobstore import BlobStore


class FakeSource:
    def __init__(self, tracks: list[Track] | None = None, error: Exception | None = None) -> None:
        self.tracks = tracks or []
        self.error = error
        self.requested: list[str] = []

    def get_playlist_tracks(self, playlist_id: str) -> list[Track]:
        self.requested.append(playlist_id)
        if self.error is not None:
            raise self.error
        return list(self.tracks)


@pytest.fixture
def music_files(temp_dir: Path) -> list[Path]:
    paths = []
    for name in ("01 - Blue Monday.mp3", "random noise.wav", "bjork - hyperballad.flac"):
        path = temp_dir / name
        path.write_bytes(name.encode())
        paths.append(path)
    return paths


class TestAutoMatchRun:
    def test_matches_and_saves(
        self, store: BlobStore, playlist_tracks: list[Track], music_files: list[Path]
    ) -> None:
        saved_events: list[str] = []
        run = AutoMatchRun(
            FakeSource(playlist_tracks),
            store,
            "p1",
            music_files,
            "filename",
            on_saved=lambda entry: saved_events.append(entry.track_id),
        )

        result = asyncio.run(run.run())

        assert result.saved_track_ids == ("t1", "t2")
        assert saved_events == ["t1", "t2"]
        assert result.assignment.unmatched_track_ids == ("t3",)
        assert [c.filename for c in result.assignment.unassigned] == ["random noise.wav"]
        assert store.get("t1").data == b"01 - Blue Monday.mp3"  # type: ignore[union-attr]
        assert store.get("t2").filename == "bjork - hyperballad.flac"  # type: ignore[union-attr]

    def test_dry_run_writes_nothing(
        self, store: BlobStore, playlist_tracks: list[Track], music_files: list[Path]
    ) -> None:
        run = AutoMatchRun(
            FakeSource(playlist_tracks), store, "p1", music_files, "filename", dry_run=True
        )

        result = asyncio.run(run.run())

        assert result.dry_run
        assert len(result.assignment) == 2
        assert result.saved_track_ids == ()
        assert store.list_records() == []

    def test_invalid_mode_fails_before_fetch(self, store: BlobStore) -> None:
        source = FakeSource()
        with pytest.raises(InvalidMatchMode):
            AutoMatchRun(source, store, "p1", [], "everything")
        assert source.requested == []

    def test_accepts_enum_mode(self, store: BlobStore) -> None:
        assert AutoMatchRun(FakeSource(), store, "p1", [], MatchMode.ISRC).mode is MatchMode.ISRC

    def test_fetch_failure_propagates_without_matching(
        self, store: BlobStore, music_files: list[Path]
    ) -> None:
        run = AutoMatchRun(
            FakeSource(error=NetworkFetchFailure("offline")), store, "p1", music_files, "both"
        )

        with pytest.raises(NetworkFetchFailure):
            asyncio.run(run.run())
        assert store.list_records() == []

    def test_cancel_before_start(
        self, store: BlobStore, playlist_tracks: list[Track], music_files: list[Path]
    ) -> None:
        source = FakeSource(playlist_tracks)
        run = AutoMatchRun(source, store, "p1", music_files, "filename")
        run.cancel()

        with pytest.raises(MatchCancelled):
            asyncio.run(run.run())
        assert run.cancelled
        assert source.requested == []

    def test_cancel_between_writes_keeps_earlier_writes(
        self, store: BlobStore, playlist_tracks: list[Track], music_files: list[Path]
    ) -> None:
        run = AutoMatchRun(FakeSource(playlist_tracks), store, "p1", music_files, "filename")
        run._on_saved = lambda entry: run.cancel()

        with pytest.raises(MatchCancelled):
            asyncio.run(run.run())

        assert store.saved_ids(["t1", "t2"]) == {"t1"}

    def test_storage_failure_propagates(
        self, playlist_tracks: list[Track], music_files: list[Path]
    ) -> None:
        store = MagicMock(spec=BlobStore)
        store.put_file.side_effect = StorageWriteFailure("t1", "disk full")
        run = AutoMatchRun(FakeSource(playlist_tracks), store, "p1", music_files, "filename")

        with pytest.raises(StorageWriteFailure):
            asyncio.run(run.run())
        assert store.put_file.call_count == 1
