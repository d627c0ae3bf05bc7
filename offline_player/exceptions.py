"""Exception hierarchy for offline-player."""

from pathlib import Path


class OfflinePlayerError(Exception):
    """Base exception for all offline-player errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all offline-player errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(OfflinePlayerError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Storage Errors
class StorageError(OfflinePlayerError):
    """Local blob store errors."""

    pass


class StorageWriteFailure(StorageError):
    """Persistent storage rejected a write (quota, disk full, read-only)."""

    def __init__(self, track_id: str, reason: str) -> None:
        self.track_id = track_id
        self.reason = reason
        super().__init__(f"Could not save file for track {track_id}: {reason}")


# Playback Errors
class PlaybackError(OfflinePlayerError):
    """Playback-related errors."""

    pass


class MissingLocalFile(PlaybackError):
    """No local file is attached for the requested track.

    Expected and recoverable: the user should attach a file.
    """

    def __init__(self, track_id: str) -> None:
        self.track_id = track_id
        super().__init__(f"No local file attached for track {track_id}")


# Matching Errors
class MatchError(OfflinePlayerError):
    """Auto-match errors."""

    pass


class InvalidMatchMode(MatchError):
    """Unrecognized match mode token."""

    def __init__(self, value: object, allowed: tuple[str, ...]) -> None:
        self.value = value
        self.allowed = allowed
        super().__init__(f"Invalid match mode {value!r}, expected one of: {', '.join(allowed)}")


class MatchCancelled(MatchError):
    """A match run was cancelled before it completed."""

    pass


class TagParseFailure(MatchError):
    """Embedded tags could not be read from a file.

    Raised inside tag extraction only; callers see an empty tag set.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read tags from {path}: {reason}")


# Remote Errors
class NetworkFetchFailure(OfflinePlayerError):
    """Fetching playlist data from the remote service failed."""

    pass


class RemoteAuthError(NetworkFetchFailure):
    """The access token was rejected (expired or missing scopes)."""

    pass
