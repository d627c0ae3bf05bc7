"""Reduce Spotify Web API JSON to the records this package uses."""

from __future__ import annotations

from typing import Any

from offline_player.models import Playlist, Track


def parse_track_item(item: dict[str, Any]) -> Track | None:
    """Convert one playlist-track item into a Track.

    Returns None for items without a track (removed or unavailable) and
    for local-file entries, which have no remote id.
    """
    track = item.get("track")
    if not track or not track.get("id"):
        return None

    artists = ", ".join(a.get("name", "") for a in track.get("artists") or [] if a.get("name"))
    isrc = (track.get("external_ids") or {}).get("isrc") or None
    return Track(
        id=str(track["id"]),
        name=track.get("name") or "",
        artists=artists,
        duration_ms=int(track.get("duration_ms") or 0),
        isrc=isrc,
    )


def parse_track_page(page: dict[str, Any]) -> list[Track]:
    """Parse one page of ``/playlists/{id}/tracks``, preserving order."""
    tracks: list[Track] = []
    for item in page.get("items") or []:
        track = parse_track_item(item)
        if track is not None:
            tracks.append(track)
    return tracks


def parse_playlist_page(page: dict[str, Any]) -> list[Playlist]:
    """Parse one page of ``/me/playlists``."""
    playlists: list[Playlist] = []
    for item in page.get("items") or []:
        if not item or not item.get("id"):
            continue
        playlists.append(
            Playlist(
                id=str(item["id"]),
                name=item.get("name") or "",
                tracks_href=(item.get("tracks") or {}).get("href"),
            )
        )
    return playlists
