"""Command line entry point for spaces."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from ._output import error, info, success
from .clone import execute
from .config import CONFIG_ENV_VAR, Config, load_config
from .core.utils import console, setup_rich_logging
from .errors import SpacesError
from .purge import purge_spaces
from .tui import run_wizard

app = typer.Typer(
    name="spaces",
    help="""Maintain parallel checkouts ("spaces") of remote repositories.

Every space is a clone of one repository at one branch, stored at
`<spaces_dir>/<owner>/<repo>-<branch>`.

**Commands:**

- `spaces new` — Pick a repository and branch interactively and clone it
- `spaces list` — Show the spaces found on disk
- `spaces purge` — Delete every space
""",
    add_completion=True,
    rich_markup_mode="markdown",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"spaces {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        str | None,
        typer.Option(
            "--config",
            "-c",
            envvar=CONFIG_ENV_VAR,
            help="Path to the YAML config file. Defaults to ~/.spaces.yml",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            envvar="SPACES_LOG_LEVEL",
            help="Logging level: debug, info, warning, error",
        ),
    ] = "warning",
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit",
        ),
    ] = False,
) -> None:
    """Maintain parallel checkouts ("spaces") of remote repositories."""
    setup_rich_logging(log_level)
    ctx.obj = config_file


def _load(ctx: typer.Context) -> Config:
    try:
        return load_config(ctx.obj)
    except SpacesError as e:
        error(str(e))


@app.command("new")
def new(ctx: typer.Context) -> None:
    """Create a new space interactively.

    **Stages:**

    1. **Repo**: type to fuzzy-filter the configured repositories, ↑/↓/Tab to highlight, Enter to pick
    2. **Branch**: type a branch name (blank = the repository's default branch), or highlight an
       existing space to reuse it
    3. **Base Branch**: for a new branch, optionally name the branch to fork from

    The destination path is copied to the clipboard after a successful clone.
    Ctrl+C cancels without touching anything.
    """
    config = _load(ctx)
    if not config.repos:
        error("No repositories configured. Add some under `repos:` in your config file")

    selection = run_wizard(config)
    if selection is None:
        return

    info(f"Preparing space for {selection.repository.location}...")
    try:
        outcome = execute(config, selection.repository, selection.branch, selection.base_branch)
    except SpacesError as e:
        error(str(e))

    success(outcome.message)
    console.print(
        Panel(
            f"[bold]Space:[/bold] {escape(str(outcome.destination))}\n"
            f"[bold]Branch:[/bold] {escape(outcome.branch)}",
            title="[green]Success[/green]",
            border_style="green",
        ),
    )


@app.command("purge")
def purge(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Delete the spaces directory and every space in it."""
    config = _load(ctx)

    if not yes:
        console.print(f"[bold]Will remove:[/bold] {escape(str(config.spaces_dir))}")
        if not typer.confirm("Continue?"):
            raise typer.Abort

    try:
        message = purge_spaces(config)
    except SpacesError as e:
        error(str(e))
    success(message)


@app.command("list")
def list_spaces(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON. Fields: owner, name, path"),
    ] = False,
) -> None:
    """List the spaces found under the spaces directory."""
    config = _load(ctx)
    rows = [
        (owner, name, config.spaces_dir / owner / name)
        for owner, names in config.current_spaces.items()
        for name in names
    ]

    if json_output:
        data = [{"owner": owner, "name": name, "path": path.as_posix()} for owner, name, path in rows]
        print(json.dumps({"spaces": data}))
        return

    if not rows:
        console.print(f"[dim]No spaces found in {escape(str(config.spaces_dir))}[/dim]")
        return

    table = Table(title="Spaces")
    table.add_column("Owner", style="cyan")
    table.add_column("Space", style="green")
    table.add_column("Path", style="dim", overflow="fold")

    home = Path.home()
    for owner, name, path in rows:
        try:
            display_path = "~/" + str(path.relative_to(home))
        except ValueError:
            display_path = str(path)
        table.add_row(owner, name, display_path)

    console.print(table)
