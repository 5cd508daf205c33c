"""Help overlay renderables."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from textual.binding import Binding

from .hotkeys import CONNECTION_KEYS, DIALOG_KEYS, GRID_KEYS, LIST_KEYS, QUERY_KEYS, global_bindings
from .styles import DIALOG_BORDER

PANEL_SECTIONS: Sequence[Tuple[str, List[Binding]]] = (
    ("Connections", CONNECTION_KEYS),
    ("Databases / Tables", LIST_KEYS),
    ("Query Editor", QUERY_KEYS),
    ("Output Grid", GRID_KEYS),
    ("Dialogs", DIALOG_KEYS),
)


def _bindings_table(title: str, bindings: Iterable[Binding]) -> Table:
    table = Table(title=title, title_justify="left", show_edge=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Action")
    for binding in bindings:
        table.add_row(binding.key.replace(",", " / "), binding.description or binding.action)
    return table


def help_renderable(bindings: Optional[List[Binding]] = None, *, close_key: str = "?") -> Panel:
    """Return the help overlay listing global and per-panel keys."""

    tables = [_bindings_table("Global", bindings or global_bindings())]
    tables.extend(_bindings_table(title, keys) for title, keys in PANEL_SECTIONS)
    return Panel(
        Group(*tables),
        title="Help",
        subtitle=f"press {close_key} to close",
        box=box.ROUNDED,
        border_style=DIALOG_BORDER,
    )


__all__ = ["help_renderable"]
