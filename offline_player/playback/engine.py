"""Interface between the playback controller and a host media engine."""

from __future__ import annotations

from typing import Protocol


class MediaEventListener(Protocol):
    """Receives asynchronous notifications from a media engine."""

    def on_time_update(self, position_seconds: float) -> None: ...

    def on_duration_change(self, duration_seconds: float) -> None: ...

    def on_playing(self) -> None: ...

    def on_paused(self) -> None: ...

    def on_ended(self) -> None: ...


class MediaEngine(Protocol):
    """Decodes and renders audio. Supplied by the host.

    ``load``, ``play`` and ``pause`` may suspend; the rest return at once.
    Volume is a float in [0, 1].
    """

    async def load(self, data: bytes, mime: str, filename: str) -> None: ...

    async def play(self) -> None: ...

    async def pause(self) -> None: ...

    def stop(self) -> None: ...

    def seek(self, position_seconds: float) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def subscribe(self, listener: MediaEventListener) -> None: ...
