"""Unit tests for the attach, detach and saved commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from offline_player.cli import EXIT_STORAGE_ERROR, cli
from offline_player.store.blobstore import BlobStore


def _invoke(config: Path, *args: str):
    return CliRunner().invoke(cli, ["--config", str(config), *args])


def _audio(temp_dir: Path, name: str = "blue monday.mp3", data: bytes = b"ID3data") -> Path:
    path = temp_dir / name
    path.write_bytes(data)
    return path


class TestAttach:
    def test_attaches_file(self, sample_config: Path, store_path: Path, temp_dir: Path) -> None:
        result = _invoke(sample_config, "attach", "t1", str(_audio(temp_dir)))

        assert result.exit_code == 0, result.output
        assert "Saved for offline" in result.output
        store = BlobStore(store_path)
        try:
            record = store.get("t1")
            assert record is not None
            assert (record.filename, record.mime, record.data) == (
                "blue monday.mp3",
                "audio/mpeg",
                b"ID3data",
            )
        finally:
            store.close()

    def test_explicit_mime(self, sample_config: Path, store_path: Path, temp_dir: Path) -> None:
        path = _audio(temp_dir, "track.bin")
        result = _invoke(sample_config, "attach", "t1", str(path), "--mime", "audio/ogg")

        assert result.exit_code == 0, result.output
        store = BlobStore(store_path)
        try:
            assert store.get("t1").mime == "audio/ogg"  # type: ignore[union-attr]
        finally:
            store.close()

    def test_store_override(self, sample_config: Path, store_path: Path, temp_dir: Path) -> None:
        other = temp_dir / "other.db"

        audio = str(_audio(temp_dir))

        result = _invoke(sample_config, "--store", str(other), "attach", "t2", audio)

        assert result.exit_code == 0, result.output
        store = BlobStore(other)
        try:
            assert store.has("t2")
        finally:
            store.close()
        assert not store_path.exists()

    def test_quota_exceeded(self, temp_dir: Path, store_path: Path) -> None:
        config = temp_dir / "quota.toml"
        config.write_text(f'[store]\npath = "{store_path}"\nquota_bytes = 4\n')

        result = _invoke(config, "attach", "t1", str(_audio(temp_dir, data=b"too large")))

        assert result.exit_code == EXIT_STORAGE_ERROR
        assert "quota" in result.output

    def test_missing_file_is_usage_error(self, sample_config: Path, temp_dir: Path) -> None:
        result = _invoke(sample_config, "attach", "t1", str(temp_dir / "nope.mp3"))
        assert result.exit_code == 2
        assert "does not exist" in result.output


class TestDetach:
    def test_removes_attached_files(self, sample_config: Path, store_path: Path) -> None:
        store = BlobStore(store_path)
        store.put("t1", "a.mp3", "audio/mpeg", b"a")
        store.put("t2", "b.mp3", "audio/mpeg", b"b")
        store.close()

        result = _invoke(sample_config, "detach", "t1", "t3")

        assert result.exit_code == 0, result.output
        assert "Removed 1 file(s)" in result.output
        assert "Nothing attached for t3" in result.output
        store = BlobStore(store_path)
        try:
            assert store.saved_ids(["t1", "t2"]) == {"t2"}
        finally:
            store.close()

    def test_requires_track_id(self, sample_config: Path) -> None:
        result = _invoke(sample_config, "detach")
        assert result.exit_code == 2


class TestSaved:
    def test_lists_records(self, sample_config: Path, store_path: Path) -> None:
        store = BlobStore(store_path)
        store.put("t1", "a.mp3", "audio/mpeg", b"a" * 2048)
        store.close()

        result = _invoke(sample_config, "saved")

        assert result.exit_code == 0, result.output
        assert "a.mp3" in result.output
        assert "2.0 KiB" in result.output

    def test_empty_store(self, sample_config: Path) -> None:
        result = _invoke(sample_config, "saved")
        assert result.exit_code == 0
        assert "No files saved yet" in result.output

    def test_listing_never_loads_payloads(self, sample_config: Path, store_path: Path) -> None:
        store = BlobStore(store_path)
        store.put("t1", "a.mp3", "audio/mpeg", b"a" * 1024)
        store.put("t2", "b.mp3", "audio/mpeg", b"b" * 1024)
        store.close()

        with (
            patch.object(BlobStore, "list_records", side_effect=AssertionError("payloads read")),
            patch.object(BlobStore, "get", side_effect=AssertionError("payload read")),
        ):
            result = _invoke(sample_config, "saved")

        assert result.exit_code == 0, result.output
        assert "2 files, 2.0 KiB" in result.output
