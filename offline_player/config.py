"""Configuration management for offline-player."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from offline_player.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from offline_player.matching.engine import MATCH_MODES
from offline_player.spotify.client import DEFAULT_API_BASE_URL
from offline_player.store.session import get_default_store_path
from offline_player.utils.fileops import secure_atomic_write

TOKEN_ENV_VAR = "SPOTIFY_ACCESS_TOKEN"


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "offline-player" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        store_path: SQLite file holding attached audio.
        store_quota_bytes: Optional cap on total attached bytes.
        spotify_access_token: Bearer token for the Web API. The
            SPOTIFY_ACCESS_TOKEN environment variable takes precedence.
        spotify_api_base_url: Web API root.
        default_match_mode: Mode used by ``match`` when --mode is omitted.
        volume: Initial playback volume in [0, 1].
        colored_output: Whether to use colored terminal output.
        config_path: Path where config was loaded from (None if defaults).
    """

    store_path: Path = field(default_factory=get_default_store_path)
    store_quota_bytes: int | None = None
    spotify_access_token: str | None = None
    spotify_api_base_url: str = DEFAULT_API_BASE_URL
    default_match_mode: str = "filename"
    volume: float = 1.0
    colored_output: bool = True
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        self.store_path = self.store_path.expanduser().resolve()

        if self.default_match_mode not in MATCH_MODES:
            raise ConfigValidationError(
                "matching.default_mode",
                self.default_match_mode,
                f"must be one of {', '.join(MATCH_MODES)}",
            )

        if self.store_quota_bytes is not None and self.store_quota_bytes <= 0:
            raise ConfigValidationError(
                "store.quota_bytes", self.store_quota_bytes, "must be a positive integer"
            )

        if not 0.0 <= self.volume <= 1.0:
            warnings.append(f"playback.volume={self.volume} is outside 0-1, clamping")
            self.volume = min(1.0, max(0.0, self.volume))

        return warnings

    def access_token(self) -> str | None:
        """Return the token from the environment, falling back to the config file."""
        return os.environ.get(TOKEN_ENV_VAR) or self.spotify_access_token


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: offline-player init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [store] section
    store = data.get("store", {})
    if "path" in store:
        value = store["path"]
        if not isinstance(value, str):
            raise ConfigValidationError("store.path", value, "must be a string path")
        config.store_path = Path(value)

    if "quota_bytes" in store:
        value = store["quota_bytes"]
        if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
            raise ConfigValidationError("store.quota_bytes", value, "must be an integer or null")
        config.store_quota_bytes = value

    # Parse [spotify] section
    spotify = data.get("spotify", {})
    if "access_token" in spotify:
        value = spotify["access_token"]
        if value is not None and not isinstance(value, str):
            raise ConfigValidationError("spotify.access_token", value, "must be a string or null")
        config.spotify_access_token = value

    if "api_base_url" in spotify:
        value = spotify["api_base_url"]
        if not isinstance(value, str):
            raise ConfigValidationError("spotify.api_base_url", value, "must be a string")
        config.spotify_api_base_url = value

    # Parse [matching] section
    matching = data.get("matching", {})
    if "default_mode" in matching:
        value = matching["default_mode"]
        if not isinstance(value, str):
            raise ConfigValidationError("matching.default_mode", value, "must be a string")
        config.default_match_mode = value

    # Parse [playback] section
    playback = data.get("playback", {})
    if "volume" in playback:
        value = playback["volume"]
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConfigValidationError("playback.volume", value, "must be a number")
        config.volume = float(value)

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    data: dict[str, Any] = {
        "store": {
            "path": str(config.store_path),
        },
        "matching": {
            "default_mode": config.default_match_mode,
        },
        "playback": {
            "volume": config.volume,
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    if config.store_quota_bytes is not None:
        data["store"]["quota_bytes"] = config.store_quota_bytes

    spotify_data: dict[str, Any] = {}
    if config.spotify_access_token is not None:
        spotify_data["access_token"] = config.spotify_access_token
    if config.spotify_api_base_url != DEFAULT_API_BASE_URL:
        spotify_data["api_base_url"] = config.spotify_api_base_url
    if spotify_data:
        data["spotify"] = spotify_data

    secure_atomic_write(config_path, tomli_w.dumps(data))
