"""Error types raised by the spaces commands.

Every failure that reaches the command line is a ``SpacesError``; the CLI
prints its message to stderr and exits with status 1.
"""

from __future__ import annotations


class SpacesError(Exception):
    """Base class for all spaces errors."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class SpacesIOError(SpacesError):
    """A filesystem operation or process invocation could not complete."""

    kind = "IO error"


class UrlParseError(SpacesError):
    """A repository location could not be turned into a remote URL."""

    kind = "Parse error"


class GitCommandError(SpacesError):
    """Git exited non-zero for a reason that is not recovered locally."""

    kind = "Git error"

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class ConfigError(SpacesError):
    """The configuration file is missing or invalid."""

    kind = "Config error"
