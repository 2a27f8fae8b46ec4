"""Test the config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from spaces_cli.config import (
    Config,
    RepositoryEntry,
    load_config,
    scan_spaces,
    split_location,
)
from spaces_cli.errors import ConfigError


@pytest.fixture
def spaces_dir(tmp_path: Path) -> Path:
    """A spaces directory with two owners and a stray file."""
    root = tmp_path / "spaces"
    (root / "acme" / "widgets-main" / ".git").mkdir(parents=True)
    (root / "acme" / "widgets-dev" / ".git").mkdir(parents=True)
    (root / "acme" / "notes.txt").write_text("not a space")
    (root / "other" / "tools-master" / ".git").mkdir(parents=True)
    (root / "README").write_text("top-level file")
    return root


@pytest.fixture
def config_file(tmp_path: Path, spaces_dir: Path) -> Path:
    """Provides a config file in the documented format."""
    config_content = f"""
config:
  spaces_dir: {spaces_dir}
  default_branch: main
  default_username: me
  default-token: tok
repos:
  - name: github.com/acme/widgets
    default_branch: develop
  - name: github.com/acme/gadgets.git
    username: bot
    token: bot-token
"""
    config_path = tmp_path / "spaces.yml"
    config_path.write_text(config_content)
    return config_path


class TestSplitLocation:
    """Tests for split_location."""

    def test_owner_and_name(self) -> None:
        """The last two segments are owner and name."""
        assert split_location("github.com/acme/widgets") == ("acme", "widgets")

    def test_git_suffix(self) -> None:
        """A .git suffix is stripped from the name."""
        assert split_location("https://github.com/acme/widgets.git") == ("acme", "widgets")

    def test_trailing_slash(self) -> None:
        """A trailing slash is ignored."""
        assert split_location("github.com/acme/widgets/") == ("acme", "widgets")

    def test_no_owner(self) -> None:
        """A bare name has an empty owner."""
        assert split_location("widgets") == ("", "widgets")


class TestLoadConfig:
    """Tests for load_config."""

    def test_loads_repositories(self, config_file: Path) -> None:
        """Repositories and defaults are parsed into typed models."""
        config = load_config(str(config_file))
        assert [r.location for r in config.repos] == [
            "github.com/acme/widgets",
            "github.com/acme/gadgets.git",
        ]
        assert config.repos[0].default_branch == "develop"
        assert config.repos[1].username == "bot"
        assert config.repos[1].token == "bot-token"
        assert config.config.default_branch == "main"
        assert config.config.default_username == "me"

    def test_dashed_keys(self, config_file: Path) -> None:
        """Dashed keys are accepted as underscores."""
        config = load_config(str(config_file))
        assert config.config.default_token == "tok"

    def test_scans_spaces(self, config_file: Path) -> None:
        """Existing spaces are discovered two levels deep."""
        config = load_config(str(config_file))
        assert config.current_spaces == {
            "acme": ["widgets-dev", "widgets-main"],
            "other": ["tools-master"],
        }

    def test_scan_can_be_skipped(self, config_file: Path) -> None:
        """scan=False leaves the index empty."""
        config = load_config(str(config_file), scan=False)
        assert config.current_spaces == {}

    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Missing settings fall back to defaults."""
        monkeypatch.setenv("HOME", str(tmp_path))
        config_path = tmp_path / "minimal.yml"
        config_path.write_text("repos:\n  - name: github.com/acme/widgets\n")
        config = load_config(str(config_path))
        assert config.config.default_branch == "master"
        assert config.config.default_username is None
        assert config.config.clipboard is True
        assert config.spaces_dir == tmp_path / "spaces"
        assert config.current_spaces == {}

    def test_expands_user(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A ~ in spaces_dir is expanded."""
        monkeypatch.setenv("HOME", str(tmp_path))
        config_path = tmp_path / "c.yml"
        config_path.write_text("config:\n  spaces_dir: ~/work/spaces\n")
        config = load_config(str(config_path))
        assert config.spaces_dir == tmp_path / "work" / "spaces"

    def test_env_var(self, config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """SPACES_CONFIG is used when no path is given."""
        monkeypatch.setenv("SPACES_CONFIG", str(config_file))
        config = load_config()
        assert len(config.repos) == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing config file is a config error."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Broken YAML is a config error."""
        config_path = tmp_path / "bad.yml"
        config_path.write_text("repos: [unclosed\n")
        with pytest.raises(ConfigError, match="Error parsing"):
            load_config(str(config_path))

    def test_invalid_schema(self, tmp_path: Path) -> None:
        """A repository without a name is rejected."""
        config_path = tmp_path / "bad.yml"
        config_path.write_text("repos:\n  - default_branch: main\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(str(config_path))

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        """The top level must be a mapping."""
        config_path = tmp_path / "list.yml"
        config_path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(str(config_path))

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file is an empty catalog."""
        config_path = tmp_path / "empty.yml"
        config_path.write_text("")
        config = load_config(str(config_path), scan=False)
        assert config.repos == []


class TestCatalog:
    """Tests for the Config helpers."""

    def test_scan_missing_dir(self, tmp_path: Path) -> None:
        """A missing spaces directory gives an empty index."""
        assert scan_spaces(tmp_path / "missing") == {}

    def test_scan_skips_non_checkouts(self, spaces_dir: Path) -> None:
        """Directories without a .git entry, like the parent of a feature/x space, are skipped."""
        (spaces_dir / "acme" / "widgets-feature" / "x" / ".git").mkdir(parents=True)
        (spaces_dir / "acme" / "scratch").mkdir()
        assert scan_spaces(spaces_dir)["acme"] == ["widgets-dev", "widgets-main"]

    def test_scan_accepts_git_file(self, spaces_dir: Path) -> None:
        """A .git file, as in linked worktrees, marks a space too."""
        (spaces_dir / "other" / "tools-dev").mkdir()
        (spaces_dir / "other" / "tools-dev" / ".git").write_text("gitdir: elsewhere\n")
        assert scan_spaces(spaces_dir)["other"] == ["tools-dev", "tools-master"]

    def test_spaces_for_owner(self) -> None:
        """Spaces are looked up by the repository owner."""
        config = Config(current_spaces={"acme": ["widgets-main"]})
        widgets = RepositoryEntry(location="github.com/acme/widgets")
        tools = RepositoryEntry(location="github.com/other/tools")
        assert config.spaces_for(widgets) == ["widgets-main"]
        assert config.spaces_for(tools) == []

    def test_repository_is_immutable(self) -> None:
        """Repository entries cannot be changed after loading."""
        widgets = RepositoryEntry(location="github.com/acme/widgets")
        with pytest.raises(ValueError, match="frozen"):
            widgets.location = "other"  # type: ignore[misc]
