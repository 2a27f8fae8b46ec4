"""Turn a completed selection into a checked-out space on disk.

A space for ``owner/repo`` at ``branch`` always lives at
``<spaces_dir>/<owner>/<repo>-<branch>``; the wizard relies on the same
naming to offer existing spaces for reuse.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal, NoReturn
from urllib.parse import quote, urlsplit, urlunsplit

import pyperclip

from .config import split_location
from .errors import GitCommandError, SpacesIOError, UrlParseError
from .git import Failure, GitResult, SubprocessGit, classify

if TYPE_CHECKING:
    from .config import Config, RepositoryEntry
    from .git import GitBackend

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("https", "http", "ssh", "git")

Action = Literal["cloned", "created", "forked", "existing"]


@dataclass(frozen=True)
class CloneOutcome:
    """Result of a successful ``execute`` call."""

    destination: Path
    branch: str
    action: Action
    message: str


def resolve_branch(config: Config, repository: RepositoryEntry, branch_input: str) -> str:
    """Return the branch to check out: the input, else the repo default, else the global default."""
    if branch_input:
        return branch_input
    return repository.default_branch or config.config.default_branch


def space_path(spaces_dir: Path, location: str, branch: str) -> Path:
    """Compute the directory of the space for ``location`` at ``branch``."""
    owner, repo_name = split_location(location)
    return spaces_dir / owner / f"{repo_name}-{branch}"


def authenticated_url(location: str, username: str | None = None, token: str | None = None) -> str:
    """Build the remote URL for ``location`` with credentials as userinfo.

    Locations without a scheme (``github.com/acme/widgets``) are treated as
    https. Existing userinfo in the location is replaced when credentials are
    given.

    Raises:
        UrlParseError: The location is not a usable remote URL.

    """
    raw = location.strip()
    if "://" not in raw:
        raw = f"https://{raw}"

    try:
        parts = urlsplit(raw)
        hostname = parts.hostname
        port = parts.port
    except ValueError as e:
        msg = f"Invalid repository location {location!r}: {e}"
        raise UrlParseError(msg) from e

    if parts.scheme not in SUPPORTED_SCHEMES:
        msg = f"Unsupported scheme {parts.scheme!r} in repository location {location!r}"
        raise UrlParseError(msg)
    if not hostname:
        msg = f"Repository location {location!r} has no host"
        raise UrlParseError(msg)
    if len([s for s in parts.path.split("/") if s]) < 2:  # noqa: PLR2004
        msg = f"Repository location {location!r} must include an owner and a repository name"
        raise UrlParseError(msg)

    if not username and not token:
        return urlunsplit(parts)

    userinfo = ":".join(quote(v, safe="") for v in (username, token) if v)
    host = f"[{hostname}]" if ":" in hostname else hostname
    netloc = f"{userinfo}@{host}" if port is None else f"{userinfo}@{host}:{port}"
    return urlunsplit(parts._replace(netloc=netloc))


def _credentials(config: Config, repository: RepositoryEntry) -> tuple[str | None, str | None]:
    settings = config.config
    return (
        repository.username or settings.default_username,
        repository.token or settings.default_token,
    )


def _raise_for(result: GitResult, action: str) -> NoReturn:
    msg = f"Failed to {action}: {result.output or 'git exited with an error'}"
    raise GitCommandError(msg, output=result.output)


def copy_to_clipboard(text: str) -> bool:
    """Copy ``text`` to the clipboard, logging instead of failing."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning("Could not copy to clipboard: %s", e)
        return False
    return True


def execute(
    config: Config,
    repository: RepositoryEntry,
    branch_input: str,
    base_branch_input: str,
    git: GitBackend | None = None,
) -> CloneOutcome:
    """Clone ``repository`` into its space and check out the requested branch.

    Without a base branch, the branch is cloned directly; if the remote has no
    such branch, the default branch is cloned and a new local branch is
    created. With a base branch, the base is cloned and the requested branch is
    created from it. A destination that already exists counts as success and
    is left untouched.

    Raises:
        UrlParseError: The repository location is malformed.
        GitCommandError: Git failed for any other reason.
        SpacesIOError: Git could not be executed.

    """
    git = git or SubprocessGit()
    branch = resolve_branch(config, repository, branch_input)
    destination = space_path(config.spaces_dir, repository.location, branch)
    url = authenticated_url(repository.location, *_credentials(config, repository))

    action: Action
    if base_branch_input:
        action = _fork_branch(git, url, destination, branch, base_branch_input)
    else:
        action = _clone_branch(git, url, destination, branch)

    if config.config.clipboard:
        copy_to_clipboard(str(destination))

    if action == "existing":
        message = f"Space already exists at {destination}"
    else:
        message = f"Cloned into {destination}"
    return CloneOutcome(destination=destination, branch=branch, action=action, message=message)


def _clone_branch(git: GitBackend, url: str, destination: Path, branch: str) -> Action:
    result = git.clone_branch(url, branch, destination)
    failure = classify(result)
    if failure is None:
        return "cloned"
    if failure is Failure.ALREADY_EXISTS:
        logger.info("%s already exists, leaving it as is", destination)
        return "existing"
    if failure is Failure.OTHER:
        _raise_for(result, f"clone branch {branch!r}")

    logger.info("Branch %r not found upstream, creating it from the default branch", branch)
    result = git.clone_default(url, destination)
    failure = classify(result)
    if failure is Failure.ALREADY_EXISTS:
        return "existing"
    if failure is not None:
        _raise_for(result, "clone repository")
    _checkout_new_branch(git, destination, branch)
    return "created"


def _fork_branch(git: GitBackend, url: str, destination: Path, branch: str, base_branch: str) -> Action:
    result = git.clone_branch(url, base_branch, destination)
    failure = classify(result)
    if failure is Failure.ALREADY_EXISTS:
        logger.info("%s already exists, leaving it as is", destination)
        return "existing"
    if failure is not None:
        _raise_for(result, f"clone base branch {base_branch!r}")
    _checkout_new_branch(git, destination, branch)
    return "forked"


def _checkout_new_branch(git: GitBackend, destination: Path, branch: str) -> None:
    """Create ``branch`` in a clone made by this run, removing the clone on failure."""
    result = git.checkout_new_branch(destination, branch)
    if result.ok:
        return
    logger.info("Removing %s after failing to create branch %r", destination, branch)
    try:
        shutil.rmtree(destination)
    except FileNotFoundError:
        pass
    except OSError as e:
        msg = f"Failed to remove {destination} after failing to create branch {branch!r}: {e}"
        raise SpacesIOError(msg) from e
    _raise_for(result, f"create branch {branch!r}")
