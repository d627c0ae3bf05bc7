"""Spotify Web API access for playlist metadata."""

from offline_player.spotify.client import DEFAULT_API_BASE_URL, SpotifyClient
from offline_player.spotify.parser import (
    parse_playlist_page,
    parse_track_item,
    parse_track_page,
)

__all__ = [
    "DEFAULT_API_BASE_URL",
    "SpotifyClient",
    "parse_playlist_page",
    "parse_track_item",
    "parse_track_page",
]
