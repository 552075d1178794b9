"""Tests for MdSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from mdctl.config.settings import MdSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MDCTL_CONFIG", raising=False)
    monkeypatch.delenv("MDCTL_STORAGE__BASE_PATH", raising=False)


class TestMdSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = MdSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.storage.base_path == "public/data/content/markdown"
        assert settings.migration.batch_size == 10
        assert settings.migration.excluded_files == ["tags.json"]
        assert "youtube.com" in settings.embeds.allowed_iframe_hosts

    def test_resolved_paths(self, tmp_path: Path) -> None:
        settings = MdSettings.from_cli(project_root=tmp_path)
        assert settings.markdown_base == tmp_path / "public" / "data" / "content" / "markdown"
        assert settings.data_dir == tmp_path / "public" / "data" / "content"

    def test_absolute_base_path_kept(self, tmp_path: Path) -> None:
        elsewhere = tmp_path / "elsewhere"
        settings = MdSettings.from_cli(
            project_root=tmp_path / "site", storage={"base_path": str(elsewhere)}
        )
        assert settings.markdown_base == elsewhere

    def test_frozen(self, tmp_path: Path) -> None:
        settings = MdSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "mdctl.toml").write_text(
            '[storage]\nbase_path = "content"\n[migration]\nbatch_size = 3\n'
        )
        settings = MdSettings.from_cli(project_root=tmp_path)
        assert settings.storage.base_path == "content"
        assert settings.migration.batch_size == 3
        assert settings.migration.backup_original is True  # default preserved

    def test_root_from_config_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "mdctl.toml").write_text("")
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        monkeypatch.chdir(child)
        settings = MdSettings.from_cli()
        assert settings.project_root == tmp_path.resolve()
        assert settings.config_path == tmp_path.resolve() / "mdctl.toml"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[migration]\ndata_dir = "legacy"\n')
        settings = MdSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.migration.data_dir == "legacy"
        assert settings.config_path == custom

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="Config file not found"):
            MdSettings.from_cli(config_path=str(tmp_path / "nope.toml"))

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "mdctl.toml").write_text("[storage\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            MdSettings.from_cli(project_root=tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "mdctl.toml").write_text("[migration]\nbatch_size = 0\n")
        with pytest.raises(click.ClickException, match="Invalid configuration"):
            MdSettings.from_cli(project_root=tmp_path)

    def test_invalid_directory_layout(self, tmp_path: Path) -> None:
        (tmp_path / "mdctl.toml").write_text('[storage.directories]\nblog = "../escape"\n')
        with pytest.raises(click.ClickException, match="Invalid configuration"):
            MdSettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "mdctl.toml").write_text('[storage]\nbase_path = "from-toml"\n')
        monkeypatch.setenv("MDCTL_STORAGE__BASE_PATH", "from-env")
        settings = MdSettings.from_cli(project_root=tmp_path)
        assert settings.storage.base_path == "from-env"

    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = MdSettings.from_cli(
            project_root=tmp_path,
            json_output=True,
            quiet=True,
            verbose=True,
            log_json=True,
        )
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True
        assert settings.log_json is True
