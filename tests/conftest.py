"""Shared test fixtures and configuration."""

from __future__ import annotations

import contextlib
import io
from pathlib import Path

import pytest
from rich.console import Console

from spaces_cli.config import Config, RepositoryEntry, SpaceSettings


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Set default timeout for all tests."""
    for item in items:
        with contextlib.suppress(AttributeError):
            item.add_marker(pytest.mark.timeout(3))


@pytest.fixture(autouse=True)
def no_clipboard(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Capture clipboard writes instead of touching the real clipboard."""
    copied: list[str] = []
    monkeypatch.setattr("spaces_cli.clone.pyperclip.copy", copied.append)
    return copied


@pytest.fixture
def mock_console() -> Console:
    """Provide a console that writes to a StringIO for testing."""
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def widgets() -> RepositoryEntry:
    """The repository used in most scenarios."""
    return RepositoryEntry(location="github.com/acme/widgets", default_branch="main")


@pytest.fixture
def catalog(widgets: RepositoryEntry) -> Config:
    """A small catalog with existing spaces for the ``acme`` owner."""
    return Config(
        config=SpaceSettings(spaces_dir=Path("/home/u/spaces")),
        repos=[
            widgets,
            RepositoryEntry(location="github.com/acme/gadgets.git"),
            RepositoryEntry(location="gitlab.com/other/tools"),
        ],
        current_spaces={
            "acme": ["widgets-main", "widgets-feature-login", "gadgets-master"],
        },
    )
