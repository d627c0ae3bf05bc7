"""offline-player: play your own audio files in place of remote playlist tracks."""

__version__ = "0.1.0"
