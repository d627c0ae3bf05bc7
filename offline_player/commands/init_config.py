"""Initialize configuration file for offline-player."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from offline_player.cli import EXIT_USAGE_ERROR, Context, pass_context
from offline_player.config import get_default_config_path
from offline_player.utils.fileops import secure_mkdir
from offline_player.utils.output import error, info, success


def _load_example_config() -> str:
    """Load the example configuration from package data."""
    return resources.files("offline_player").joinpath("config.example.toml").read_text()


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/offline-player/config.toml)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None) -> None:
    """Create a new configuration file with default settings.

    Examples:

    \b
      # Create config at default location
      offline-player init-config

    \b
      # Create config at custom location
      offline-player init-config --output ./my-config.toml
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(EXIT_USAGE_ERROR)

    secure_mkdir(config_path.parent)

    try:
        config_path.write_text(_load_example_config())
        config_path.chmod(0o600)
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(EXIT_USAGE_ERROR)

    success(f"Created config file: {config_path}")
    info("Add your Spotify access token under [spotify] or export SPOTIFY_ACCESS_TOKEN.")
