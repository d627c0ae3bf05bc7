"""Shared pytest fixtures."""

from __future__ import annotations

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from offline_player.models import Track
from offline_player.store.blobstore import BlobStore

if TYPE_CHECKING:
    from collections.abc import Generator

    from offline_player.playback.engine import MediaEventListener


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def store_path(temp_dir: Path) -> Path:
    return temp_dir / "store" / "offline-audio.db"


@pytest.fixture
def store(store_path: Path) -> Generator[BlobStore, None, None]:
    """An empty blob store in a temporary directory."""
    blob_store = BlobStore(store_path)
    try:
        yield blob_store
    finally:
        blob_store.close()


@pytest.fixture
def sample_config(temp_dir: Path, store_path: Path) -> Path:
    """Create a sample config file pointing at the temporary store."""
    config_path = temp_dir / "config.toml"
    config_path.write_text(f"""[store]
path = "{store_path}"

[spotify]
access_token = "test-token"
api_base_url = "https://api.example.test/v1"

[matching]
default_mode = "both"

[playback]
volume = 0.5

[display]
colored_output = false
""")
    return config_path


@pytest.fixture
def no_token_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPOTIFY_ACCESS_TOKEN", raising=False)


@pytest.fixture
def playlist_tracks() -> list[Track]:
    return [
        Track(id="t1", name="Blue Monday", artists="New Order", duration_ms=449000),
        Track(id="t2", name="Hyperballad", artists="Björk", duration_ms=321000),
        Track(id="t3", name="Windowlicker", artists="Aphex Twin", duration_ms=367000),
    ]


class FakeMediaEngine:
    """In-memory MediaEngine that records calls and lets tests fire events.

    ``load_gate`` can be set to an asyncio.Event to hold ``load`` until the
    test releases it.
    """

    def __init__(self) -> None:
        self.listeners: list[MediaEventListener] = []
        self.calls: list[tuple] = []
        self.loaded: tuple[bytes, str, str] | None = None
        self.volume: float | None = None
        self.load_gate: asyncio.Event | None = None
        self.fail_on_load: Exception | None = None

    def subscribe(self, listener: MediaEventListener) -> None:
        self.listeners.append(listener)

    async def load(self, data: bytes, mime: str, filename: str) -> None:
        self.calls.append(("load", filename))
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.fail_on_load is not None:
            raise self.fail_on_load
        self.loaded = (data, mime, filename)

    async def play(self) -> None:
        self.calls.append(("play",))

    async def pause(self) -> None:
        self.calls.append(("pause",))

    def stop(self) -> None:
        self.calls.append(("stop",))

    def seek(self, position_seconds: float) -> None:
        self.calls.append(("seek", position_seconds))

    def set_volume(self, volume: float) -> None:
        self.volume = volume
        self.calls.append(("volume", volume))

    def close(self) -> None:
        self.calls.append(("close",))

    def emit(self, event: str, *args: float) -> None:
        for listener in self.listeners:
            getattr(listener, event)(*args)


@pytest.fixture
def fake_engine() -> FakeMediaEngine:
    return FakeMediaEngine()
