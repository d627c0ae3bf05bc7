"""Playback of locally attached files."""

from offline_player.playback.controller import (
    PlaybackController,
    PlaybackSession,
    PlaybackState,
)
from offline_player.playback.engine import MediaEngine, MediaEventListener
from offline_player.playback.volume import angle_to_volume, clamp_volume

__all__ = [
    "MediaEngine",
    "MediaEventListener",
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
    "angle_to_volume",
    "clamp_volume",
]
