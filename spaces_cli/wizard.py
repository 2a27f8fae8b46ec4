"""Selection state for the interactive ``spaces new`` flow.

The wizard walks through three stages:

1. **Repo**: fuzzy-pick a repository from the catalog.
2. **Branch**: type a branch name, or pick one of the owner's existing spaces.
3. **BaseBranch**: optionally name a branch to fork a new branch from.

All state lives on a single ``Wizard`` object. It knows nothing about the
terminal; ``spaces_cli.tui`` feeds it key events and renders what it exposes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from .fuzzy import fuzzy_filter

if TYPE_CHECKING:
    from .config import Config, RepositoryEntry

T = TypeVar("T")


class Stage(Enum):
    REPO = "repo"
    BRANCH = "branch"
    BASE_BRANCH = "base_branch"


class Status(Enum):
    RUNNING = "running"
    DONE = "done"
    ABORTED = "aborted"


class Key(Enum):
    """Logical keys understood by the wizard."""

    CHAR = "char"
    ENTER = "enter"
    BACKSPACE = "backspace"
    UP = "up"
    DOWN = "down"
    TAB = "tab"
    ESC = "esc"
    INTERRUPT = "interrupt"


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    char: str = ""


@dataclass
class SelectableList(Generic[T]):
    """An ordered list of items with an optional highlighted index."""

    items: list[T] = field(default_factory=list)
    highlighted: int | None = None

    def replace(self, items: list[T]) -> None:
        """Swap in a new item list and clear the highlight."""
        self.items = items
        self.highlighted = None

    def next(self) -> None:
        if not self.items:
            return
        if self.highlighted is None:
            self.highlighted = 0
        else:
            self.highlighted = min(self.highlighted + 1, len(self.items) - 1)

    def previous(self) -> None:
        if not self.items:
            return
        if self.highlighted is None:
            self.highlighted = len(self.items) - 1
        else:
            self.highlighted = max(self.highlighted - 1, 0)

    def clear(self) -> None:
        self.highlighted = None

    def selected(self) -> T | None:
        """Return the highlighted item, if any."""
        if self.highlighted is None or not 0 <= self.highlighted < len(self.items):
            return None
        return self.items[self.highlighted]


@dataclass(frozen=True)
class WizardResult:
    """The completed selection handed to the clone orchestrator."""

    repository: RepositoryEntry
    branch: str
    base_branch: str


class Wizard:
    """Three-stage selection state machine."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.stage = Stage.REPO
        self.status = Status.RUNNING

        self.repo_query = ""
        self.branch_query = ""
        self.base_branch_query = ""

        self.repository: RepositoryEntry | None = None
        self.repos: SelectableList[RepositoryEntry] = SelectableList(list(config.repos))
        self.spaces: SelectableList[str] = SelectableList()

    # --- Derived views ---

    @property
    def active_list(self) -> SelectableList | None:
        """The candidate list for the current stage (``None`` for BaseBranch)."""
        if self.stage is Stage.REPO:
            return self.repos
        if self.stage is Stage.BRANCH:
            return self.spaces
        return None

    @property
    def query(self) -> str:
        if self.stage is Stage.REPO:
            return self.repo_query
        if self.stage is Stage.BRANCH:
            return self.branch_query
        return self.base_branch_query

    def result(self) -> WizardResult | None:
        """Return the final selection once the flow is done."""
        if self.status is not Status.DONE or self.repository is None:
            return None
        return WizardResult(self.repository, self.branch_query, self.base_branch_query)

    # --- Event handling ---

    def handle(self, event: KeyEvent) -> None:
        """Apply one key event to the state."""
        if self.status is not Status.RUNNING:
            return

        if event.key is Key.INTERRUPT:
            self.status = Status.ABORTED
        elif event.key is Key.CHAR:
            self._set_query(self.query + event.char)
        elif event.key is Key.BACKSPACE:
            self._set_query(self.query[:-1])
        elif event.key is Key.ENTER:
            self._confirm()
        elif (candidates := self.active_list) is not None:
            if event.key in (Key.DOWN, Key.TAB):
                candidates.next()
            elif event.key is Key.UP:
                candidates.previous()
            elif event.key is Key.ESC:
                candidates.clear()

    def _set_query(self, text: str) -> None:
        if self.stage is Stage.REPO:
            self.repo_query = text
            self._filter_repos()
        elif self.stage is Stage.BRANCH:
            self.branch_query = text
            self._filter_spaces()
        else:
            self.base_branch_query = text

    def _filter_repos(self) -> None:
        candidates = [(repo.location, repo) for repo in self.config.repos]
        self.repos.replace([repo for _, repo in fuzzy_filter(candidates, self.repo_query)])

    def _filter_spaces(self) -> None:
        assert self.repository is not None
        key = f"{self.repository.short_name}-{self.branch_query}"
        candidates = [(space, space) for space in self.config.spaces_for(self.repository)]
        self.spaces.replace([space for _, space in fuzzy_filter(candidates, key)])

    def _confirm(self) -> None:
        if self.stage is Stage.REPO:
            self._confirm_repo()
        elif self.stage is Stage.BRANCH:
            self._confirm_branch()
        else:
            self.status = Status.DONE

    def _confirm_repo(self) -> None:
        repository = self.repos.selected()
        if repository is None:
            # A repository must come from the catalog; keep typing or cancel.
            return
        self.repository = repository
        self.repo_query = repository.location
        self.stage = Stage.BRANCH
        self._filter_spaces()

    def _confirm_branch(self) -> None:
        assert self.repository is not None
        prefix = f"{self.repository.short_name}-"

        space = self.spaces.selected()
        if space is not None:
            self.branch_query = space.removeprefix(prefix)
            self.status = Status.DONE
            return

        if not self.branch_query:
            self.status = Status.DONE
            return

        if prefix + self.branch_query in self.config.spaces_for(self.repository):
            self.status = Status.DONE
            return

        self.stage = Stage.BASE_BRANCH
