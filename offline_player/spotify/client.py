"""Read-only Spotify Web API client for playlist metadata.

Only metadata is fetched: profile, playlists and playlist tracks. The
access token is obtained elsewhere and passed in as-is.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

import requests

from offline_player.exceptions import NetworkFetchFailure, RemoteAuthError
from offline_player.models import Playlist, Track
from offline_player.spotify.parser import parse_playlist_page, parse_track_page

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.spotify.com/v1"

_USER_AGENT = "offline-player/0.1"
_REQUEST_TIMEOUT = 30
_PLAYLIST_PAGE_SIZE = 50
_TRACK_PAGE_SIZE = 100
_MAX_RETRIES = 5
_BACKOFF_BASE = 1.0  # seconds
_RETRY_STATUS = (429, 500, 502, 503, 504)

T = TypeVar("T")


class SpotifyClient:
    """HTTP client for the Spotify Web API.

    Args:
        access_token: A bearer token with playlist-read scopes.
        base_url: API root, overridable for tests and proxies.
    """

    def __init__(self, access_token: str, base_url: str = DEFAULT_API_BASE_URL) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {access_token}",
                "User-Agent": _USER_AGENT,
            }
        )

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Make an HTTP request with retry and backoff logic.

        Connection errors, HTTP 429 and 5xx are retried with exponential
        backoff, honouring Retry-After when the server sends it.

        Raises:
            RemoteAuthError: On HTTP 401/403.
            NetworkFetchFailure: On other HTTP errors or when retries run out.
        """
        kwargs.setdefault("timeout", _REQUEST_TIMEOUT)

        for attempt in range(_MAX_RETRIES):
            try:
                resp = self._session.request(method, url, **kwargs)
            except requests.RequestException as e:
                if attempt == _MAX_RETRIES - 1:
                    raise NetworkFetchFailure(
                        f"Request to {url} failed after {_MAX_RETRIES} attempts: {e}"
                    ) from e
                wait = _BACKOFF_BASE * (2**attempt)
                logger.warning("Request failed, retrying in %.1fs: %s", wait, e)
                time.sleep(wait)
                continue

            if resp.status_code in (401, 403):
                raise RemoteAuthError(
                    f"Spotify rejected the access token (HTTP {resp.status_code}). "
                    "Log in again to get a fresh token."
                )

            if resp.status_code in _RETRY_STATUS:
                if attempt == _MAX_RETRIES - 1:
                    raise NetworkFetchFailure(
                        f"Spotify returned HTTP {resp.status_code} after {_MAX_RETRIES} attempts"
                    )
                wait = _BACKOFF_BASE * (2**attempt)
                retry_after = resp.headers.get("Retry-After")
                if retry_after:
                    try:
                        wait = max(float(retry_after), _BACKOFF_BASE)
                    except ValueError:
                        pass
                logger.warning("HTTP %d from %s, waiting %.1fs...", resp.status_code, url, wait)
                time.sleep(wait)
                continue

            try:
                resp.raise_for_status()
            except requests.HTTPError as e:
                raise NetworkFetchFailure(f"Request to {url} failed: {e}") from e
            return resp

        raise NetworkFetchFailure(f"Request to {url} failed after {_MAX_RETRIES} attempts")

    def _get_json(self, url: str, **kwargs: Any) -> dict[str, Any]:
        resp = self._request("GET", url, **kwargs)
        try:
            data = resp.json()
        except ValueError as e:
            raise NetworkFetchFailure(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict):
            raise NetworkFetchFailure(f"Unexpected response shape from {url}")
        return data

    def _paginate(
        self, first_url: str, parse: Callable[[dict[str, Any]], list[T]]
    ) -> Iterator[T]:
        """Follow ``next`` links until the last page."""
        url: str | None = first_url
        while url:
            page = self._get_json(url)
            yield from parse(page)
            url = page.get("next")

    def get_profile(self) -> dict[str, Any]:
        """Fetch the current user's profile (``/me``)."""
        return self._get_json(self._url("me"))

    def get_playlists(self) -> list[Playlist]:
        """Fetch all playlists of the current user."""
        url = self._url(f"me/playlists?limit={_PLAYLIST_PAGE_SIZE}")
        playlists = list(self._paginate(url, parse_playlist_page))
        logger.debug("Fetched %d playlists", len(playlists))
        return playlists

    def get_playlist_tracks(self, playlist_id: str) -> list[Track]:
        """Fetch every track of a playlist, in playlist order.

        The whole list is fetched before returning; a failure on any page
        raises, so callers never see a partial snapshot.
        """
        url = self._url(f"playlists/{playlist_id}/tracks?limit={_TRACK_PAGE_SIZE}")
        tracks = list(self._paginate(url, parse_track_page))
        logger.debug("Fetched %d tracks for playlist %s", len(tracks), playlist_id)
        return tracks
