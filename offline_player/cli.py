"""Command-line interface for offline-player."""

from __future__ import annotations

import os
from pathlib import Path

import click

from offline_player import __version__
from offline_player.config import TOKEN_ENV_VAR, Config, load_config
from offline_player.exceptions import StorageError
from offline_player.spotify.client import SpotifyClient
from offline_player.store.blobstore import BlobStore
from offline_player.utils.output import (
    error,
    set_color,
    set_verbosity,
    warning,
)

# Exit codes shared by all commands
EXIT_SUCCESS = 0
EXIT_USAGE_ERROR = 1
EXIT_STORAGE_ERROR = 2
EXIT_REMOTE_ERROR = 3
EXIT_MATCH_ERROR = 4
EXIT_PLAYBACK_ERROR = 5


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False

    def require_config(self) -> Config:
        if self.config is None:
            error("Configuration not loaded")
            raise SystemExit(EXIT_USAGE_ERROR)
        return self.config

    def open_store(self) -> BlobStore:
        """Open the blob store named by the configuration, or exit."""
        config = self.require_config()
        try:
            return BlobStore(config.store_path, quota_bytes=config.store_quota_bytes)
        except StorageError as e:
            error(str(e))
            raise SystemExit(EXIT_STORAGE_ERROR) from e

    def spotify_client(self) -> SpotifyClient:
        """Build a Web API client from the configured token, or exit."""
        config = self.require_config()
        token = config.access_token()
        if not token:
            error(
                "No Spotify access token configured.",
                hint=f"Set {TOKEN_ENV_VAR} or [spotify] access_token in the config file.",
            )
            raise SystemExit(EXIT_USAGE_ERROR)
        return SpotifyClient(token, base_url=config.spotify_api_base_url)


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Path to config file (default: ~/.config/offline-player/config.toml)",
)
@click.option(
    "--store",
    "-s",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the offline store database (overrides config)",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (implies --verbose)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress non-error output",
)
@click.version_option(version=__version__, prog_name="offline-player")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    store: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """offline-player: play your own files in place of playlist tracks.

    Playlist metadata comes from Spotify; the audio comes from files you
    attach. Attached files are kept in a local database and play back
    without any network access.

    Configuration is loaded from ~/.config/offline-player/config.toml by default.
    Use --config to specify an alternative configuration file.

    Examples:

        # Match a folder of files against a playlist
        offline-player match 37i9dQZF1DXcBWIGoYBM5M ~/Music/*.mp3 --mode both

        # Play an attached track
        offline-player play 4uLU6hMCjMI75M1A2tKUQC
    """
    ctx.ensure_object(Context)
    app_ctx = ctx.obj
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet

    set_verbosity(verbose=verbose, debug=debug)

    # Color is disabled by --no-color, NO_COLOR env, or config
    disable_color = no_color or os.environ.get("NO_COLOR") is not None
    if disable_color:
        set_color(False)

    try:
        loaded_config, warnings = load_config(config)
        app_ctx.config = loaded_config

        if store is not None:
            loaded_config.store_path = store.expanduser().resolve()

        if not disable_color and not loaded_config.colored_output:
            set_color(False)

        if not quiet:
            for warn in warnings:
                warning(warn)

    except Exception as e:
        error(str(e))
        ctx.exit(EXIT_USAGE_ERROR)


def register_commands() -> None:
    """Register all commands from the commands package."""
    from offline_player.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


# Register commands on import
register_commands()
