"""Git operations used to materialize a space."""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from .errors import SpacesIOError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_BRANCH_NOT_FOUND = re.compile(r"Remote branch .+ not found", re.IGNORECASE)
_ALREADY_EXISTS = re.compile(r"already exists and is not an empty directory", re.IGNORECASE)
_USERINFO = re.compile(r"(?<=://)[^/@]+@")


@dataclass(frozen=True)
class GitResult:
    """Outcome of a single git invocation."""

    ok: bool
    output: str = ""


class Failure(Enum):
    BRANCH_NOT_FOUND = "branch_not_found"
    ALREADY_EXISTS = "already_exists"
    OTHER = "other"


def classify(result: GitResult) -> Failure | None:
    """Classify a git result. Returns ``None`` for a successful result."""
    if result.ok:
        return None
    if _ALREADY_EXISTS.search(result.output):
        return Failure.ALREADY_EXISTS
    if _BRANCH_NOT_FOUND.search(result.output):
        return Failure.BRANCH_NOT_FOUND
    return Failure.OTHER


def _redact(arg: str) -> str:
    """Hide credentials embedded in a remote URL."""
    return _USERINFO.sub("***@", arg)


class GitBackend(Protocol):
    """The git capabilities the clone orchestrator needs."""

    def clone_branch(self, url: str, branch: str, dest: Path) -> GitResult: ...

    def clone_default(self, url: str, dest: Path) -> GitResult: ...

    def checkout_new_branch(self, dest: Path, branch: str) -> GitResult: ...


class SubprocessGit:
    """``GitBackend`` that shells out to the ``git`` executable."""

    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def _run(self, args: list[str]) -> GitResult:
        logger.debug("Running: git %s", " ".join(_redact(a) for a in args))
        try:
            result = subprocess.run(
                [self.executable, *args],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            msg = f"Failed to run {self.executable}: {e}"
            raise SpacesIOError(msg) from e
        output = (result.stderr or result.stdout).strip()
        if result.returncode != 0:
            logger.debug("git exited with %d: %s", result.returncode, output)
        return GitResult(ok=result.returncode == 0, output=output)

    def clone_branch(self, url: str, branch: str, dest: Path) -> GitResult:
        return self._run(["clone", "--branch", branch, url, str(dest)])

    def clone_default(self, url: str, dest: Path) -> GitResult:
        return self._run(["clone", url, str(dest)])

    def checkout_new_branch(self, dest: Path, branch: str) -> GitResult:
        return self._run(["-C", str(dest), "checkout", "-b", branch])
