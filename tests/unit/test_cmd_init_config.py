"""Unit tests for the init-config command."""

from __future__ import annotations

import stat
import tomllib
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from offline_player.commands.init_config import _load_example_config, cli
from offline_player.config import load_config


class TestLoadExampleConfig:
    def test_loads_non_empty_content(self) -> None:
        content = _load_example_config()
        assert len(content) > 0

    def test_contains_all_sections(self) -> None:
        content = _load_example_config()
        for section in ("[store]", "[spotify]", "[matching]", "[playback]", "[display]"):
            assert section in content, f"Missing section {section}"

    def test_is_valid_toml(self) -> None:
        data = tomllib.loads(_load_example_config())
        assert data["matching"]["default_mode"] == "filename"

    def test_example_loads_as_config(self, temp_dir: Path) -> None:
        path = temp_dir / "config.toml"
        path.write_text(_load_example_config())

        config, warnings = load_config(path)

        assert warnings == []
        assert config.store_path.name == "offline-audio.db"


class TestInitConfigCommand:
    def test_creates_config_file(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["--output", "test-config.toml"], standalone_mode=False)
            assert result.exception is None
            assert Path("test-config.toml").read_text() == _load_example_config()

    def test_fails_if_exists_without_force(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("test-config.toml").write_text("existing")
            result = runner.invoke(cli, ["--output", "test-config.toml"], standalone_mode=False)
            assert isinstance(result.exception, SystemExit)
            assert result.exception.code == 1
            assert Path("test-config.toml").read_text() == "existing"

    def test_force_overwrites_existing(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("test-config.toml").write_text("old content")
            result = runner.invoke(
                cli, ["--output", "test-config.toml", "--force"], standalone_mode=False
            )
            assert result.exception is None
            content = Path("test-config.toml").read_text()
            assert "[store]" in content
            assert "old content" not in content

    def test_creates_parent_directories(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["--output", "deep/nested/dir/config.toml"], standalone_mode=False
            )
            assert result.exception is None
            assert Path("deep/nested/dir/config.toml").exists()

    def test_default_path_used_when_no_output(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            mock_path = MagicMock(return_value=Path("default-config.toml"))
            with patch("offline_player.commands.init_config.get_default_config_path", mock_path):
                result = runner.invoke(cli, [], standalone_mode=False)
            assert result.exception is None
            assert Path("default-config.toml").exists()

    def test_config_directory_is_owner_only(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["--output", "conf/offline-player/config.toml"], standalone_mode=False
            )
            assert result.exception is None
            assert stat.S_IMODE(Path("conf/offline-player").stat().st_mode) == 0o700
            assert stat.S_IMODE(Path("conf/offline-player/config.toml").stat().st_mode) == 0o600

    def test_existing_config_directory_is_tightened(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("conf").mkdir(mode=0o755)
            Path("conf").chmod(0o755)
            result = runner.invoke(cli, ["--output", "conf/config.toml"], standalone_mode=False)
            assert result.exception is None
            assert stat.S_IMODE(Path("conf").stat().st_mode) == 0o700
