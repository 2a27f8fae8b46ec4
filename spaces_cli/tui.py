"""Terminal front end for the ``spaces new`` wizard."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

import readchar
from rich.console import Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .core.utils import console
from .wizard import Key, KeyEvent, Stage, Status, Wizard

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console, RenderableType

    from .config import Config
    from .wizard import SelectableList, WizardResult

_KEY_MAP = {
    readchar.key.UP: Key.UP,
    readchar.key.DOWN: Key.DOWN,
    readchar.key.TAB: Key.TAB,
    readchar.key.ENTER: Key.ENTER,
    readchar.key.CR: Key.ENTER,
    readchar.key.LF: Key.ENTER,
    readchar.key.ESC: Key.ESC,
    readchar.key.BACKSPACE: Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    readchar.key.CTRL_C: Key.INTERRUPT,
}


def to_event(raw: str) -> KeyEvent | None:
    """Translate a raw ``readchar`` key into a wizard event.

    Returns ``None`` for keys the wizard ignores.
    """
    if raw in _KEY_MAP:
        return KeyEvent(_KEY_MAP[raw])
    if len(raw) == 1 and raw.isprintable():
        return KeyEvent(Key.CHAR, raw)
    return None


_pending: deque[str] = deque()


def read_event() -> KeyEvent | None:
    """Block until the next keypress.

    On POSIX ``readchar`` reads one more character after a lone Esc and
    returns both together (``"\\x1ba"``). Such a pair is reported as Esc and
    the trailing key is kept for the next call.
    """
    if _pending:
        return to_event(_pending.popleft())
    try:
        raw = readchar.readkey()
    except KeyboardInterrupt:
        return KeyEvent(Key.INTERRUPT)
    if raw not in _KEY_MAP and len(raw) == 2 and raw[0] == readchar.key.ESC:  # noqa: PLR2004
        _pending.append(raw[1])
        return KeyEvent(Key.ESC)
    return to_event(raw)


# --- Rendering ---


def _input_line(label: str, value: str, *, active: bool) -> Text:
    text = Text(label, style="bold" if active else "dim")
    text.append(value, style="cyan")
    if active:
        text.append("█", style="blink")
    return text


def _render_inputs(wizard: Wizard) -> Panel:
    lines = [_input_line("Repo to Clone: ", wizard.repo_query, active=wizard.stage is Stage.REPO)]
    if wizard.stage in (Stage.BRANCH, Stage.BASE_BRANCH):
        lines.append(
            _input_line(
                "Branch to Checkout (leave blank for default): ",
                wizard.branch_query,
                active=wizard.stage is Stage.BRANCH,
            ),
        )
    if wizard.stage is Stage.BASE_BRANCH:
        lines.append(
            _input_line(
                "Base Branch (leave blank for default): ",
                wizard.base_branch_query,
                active=True,
            ),
        )
    return Panel(Group(*lines), title="[bold]New Space[/bold]", border_style="cyan")


def _render_list(title: str, candidates: SelectableList, labels: list[str]) -> Panel:
    table = Table.grid(padding=(0, 1))
    table.add_column(width=1, style="cyan")
    table.add_column()
    for i, label in enumerate(labels):
        if i == candidates.highlighted:
            table.add_row(">", f"[bold cyan]{escape(label)}[/bold cyan]")
        else:
            table.add_row(" ", escape(label))
    if not labels:
        table.add_row(" ", "[dim]no matches[/dim]")
    return Panel(table, title=f"[bold]{title}[/bold]", border_style="cyan")


def render(wizard: Wizard) -> RenderableType:
    """Build the renderable for the current wizard state."""
    parts: list[RenderableType] = [_render_inputs(wizard)]
    if wizard.stage is Stage.REPO:
        labels = [repo.location for repo in wizard.repos.items]
        parts.append(_render_list("Repos", wizard.repos, labels))
    elif wizard.stage is Stage.BRANCH:
        parts.append(_render_list("Current Spaces", wizard.spaces, list(wizard.spaces.items)))
    parts.append(
        Text(
            "↑/↓/Tab to highlight, Enter to confirm, Esc to clear highlight, Ctrl+C to cancel",
            style="dim",
        ),
    )
    return Group(*parts)


def run_wizard(
    config: Config,
    *,
    read: Callable[[], KeyEvent | None] = read_event,
    rich_console: Console | None = None,
) -> WizardResult | None:
    """Run the interactive wizard until it completes or is cancelled.

    Returns the selection, or ``None`` when the user cancelled.
    """
    wizard = Wizard(config)
    with Live(
        render(wizard),
        console=rich_console or console,
        transient=True,
        auto_refresh=False,
    ) as live:
        while wizard.status is Status.RUNNING:
            event = read()
            if event is None:
                continue
            wizard.handle(event)
            live.update(render(wizard), refresh=True)
    return wizard.result()
