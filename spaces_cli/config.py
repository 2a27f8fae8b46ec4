"""Pydantic models for the spaces configuration and config file loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SPACES_CONFIG"
DEFAULT_CONFIG_FILE_NAME = ".spaces.yml"
DEFAULT_SPACES_DIR_NAME = "spaces"
DEFAULT_BRANCH = "master"


def default_config_path() -> Path:
    """Return the config path from ``$SPACES_CONFIG`` or ``~/.spaces.yml``."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / DEFAULT_CONFIG_FILE_NAME


def split_location(location: str) -> tuple[str, str]:
    """Split a repository location into ``(owner, short_name)``.

    The short name is the last ``/`` segment with a trailing ``.git`` removed,
    the owner is the segment before it (empty if there is none).
    """
    segments = location.rstrip("/").split("/")
    short_name = segments[-1].removesuffix(".git")
    owner = segments[-2] if len(segments) > 1 else ""
    return owner, short_name


# --- Pydantic Models for Configuration ---


class RepositoryEntry(BaseModel):
    """A repository that can be cloned into a space."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location: str = Field(alias="name")
    default_branch: str | None = None
    username: str | None = None
    token: str | None = None

    @property
    def owner(self) -> str:
        return split_location(self.location)[0]

    @property
    def short_name(self) -> str:
        return split_location(self.location)[1]


class SpaceSettings(BaseModel):
    """Catalog-wide settings and defaults."""

    spaces_dir: Path = Field(default_factory=lambda: Path.home() / DEFAULT_SPACES_DIR_NAME)
    default_branch: str = DEFAULT_BRANCH
    default_username: str | None = None
    default_token: str | None = None
    clipboard: bool = True

    @field_validator("spaces_dir", mode="before")
    @classmethod
    def _expand_user_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()


class Config(BaseModel):
    """The repository catalog plus the spaces discovered on disk."""

    config: SpaceSettings = Field(default_factory=SpaceSettings)
    repos: list[RepositoryEntry] = Field(default_factory=list)
    current_spaces: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def spaces_dir(self) -> Path:
        return self.config.spaces_dir

    def spaces_for(self, repository: RepositoryEntry) -> list[str]:
        """Return the existing space directory names under the repository's owner."""
        return self.current_spaces.get(repository.owner, [])

    def gather_current_spaces(self) -> None:
        """Scan ``spaces_dir`` two levels deep and record owner -> space names."""
        self.current_spaces = scan_spaces(self.spaces_dir)


def scan_spaces(spaces_dir: Path) -> dict[str, list[str]]:
    """Build the owner -> space directory names index for ``spaces_dir``.

    Only directories holding a ``.git`` entry count as spaces; the
    intermediate directories a branch like ``feature/x`` creates are skipped.
    """
    if not spaces_dir.is_dir():
        logger.debug("Spaces directory %s does not exist", spaces_dir)
        return {}

    index: dict[str, list[str]] = {}
    for owner_dir in sorted(spaces_dir.iterdir()):
        if not owner_dir.is_dir():
            continue
        index[owner_dir.name] = sorted(
            p.name for p in owner_dir.iterdir() if p.is_dir() and (p / ".git").exists()
        )
    return index


# --- Config File Loading ---


def _replace_dashed_keys_recursive(value: Any) -> Any:
    """Recursively replace dashed keys with underscores."""
    if isinstance(value, dict):
        return {str(k).replace("-", "_"): _replace_dashed_keys_recursive(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_replace_dashed_keys_recursive(v) for v in value]
    return value


def load_config(config_path_str: str | None = None, *, scan: bool = True) -> Config:
    """Load the YAML configuration file and discover existing spaces.

    Raises:
        ConfigError: The file is missing, unreadable, or does not match the schema.

    """
    config_path = Path(config_path_str).expanduser() if config_path_str else default_config_path()

    try:
        data = yaml.safe_load(config_path.read_text())
    except FileNotFoundError:
        msg = f"Config file not found at {config_path}"
        raise ConfigError(msg) from None
    except OSError as e:
        msg = f"Unable to read config file {config_path}: {e}"
        raise ConfigError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Error parsing config file {config_path}: {e}"
        raise ConfigError(msg) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Config file {config_path} must contain a mapping"
        raise ConfigError(msg)

    try:
        conf = Config.model_validate(_replace_dashed_keys_recursive(data))
    except ValidationError as e:
        msg = f"Invalid config file {config_path}: {e}"
        raise ConfigError(msg) from e

    logger.debug("Loaded %d repositories from %s", len(conf.repos), config_path)
    if scan:
        conf.gather_current_spaces()
    return conf
