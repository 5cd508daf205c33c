"""Central definition of keyboard bindings."""
from __future__ import annotations

from typing import Iterable, List, Optional

from textual.binding import Binding

from lazytables.core.config import KeybindingSettings

from .messages import KeyInput

LIST_KEYS = [
    Binding("k,up", "cursor_up", "Up"),
    Binding("j,down", "cursor_down", "Down"),
    Binding("g,home", "cursor_top", "Top"),
    Binding("G,end", "cursor_bottom", "Bottom"),
    Binding("enter,s", "select", "Select"),
]

CONNECTION_KEYS = [
    *LIST_KEYS,
    Binding("a", "add", "Add connection"),
    Binding("x,delete", "delete", "Delete connection"),
]

GRID_KEYS = [
    Binding("k,up", "move_up", "Row up"),
    Binding("j,down", "move_down", "Row down"),
    Binding("h,left", "move_left", "Column left"),
    Binding("l,right", "move_right", "Column right"),
    Binding("g,home", "first_row", "First row"),
    Binding("G,end", "last_row", "Last row"),
    Binding("pageup", "page_up", "Page up"),
    Binding("pagedown", "page_down", "Page down"),
]

QUERY_KEYS = [
    Binding("ctrl+e", "execute", "Execute query"),
    Binding("ctrl+p", "history_previous", "Previous query"),
    Binding("ctrl+n", "history_next", "Next query"),
    Binding("ctrl+l", "clear", "Clear editor"),
]

DIALOG_KEYS = [
    Binding("tab,down", "next_field", "Next field"),
    Binding("shift+tab,up", "previous_field", "Previous field"),
    Binding("enter", "confirm", "Confirm"),
    Binding("escape", "cancel", "Cancel"),
]


def global_bindings(settings: Optional[KeybindingSettings] = None) -> List[Binding]:
    """Return the shell-level bindings, honouring user overrides."""

    keys = settings or KeybindingSettings()
    return [
        Binding(keys.quit, "quit", "Quit"),
        Binding(keys.help, "help", "Toggle help"),
        Binding(keys.next_panel, "focus_next", "Next panel"),
        Binding(keys.previous_panel, "focus_previous", "Previous panel"),
        Binding(keys.focus_connections, "focus_connections", "Focus connections"),
        Binding(keys.focus_databases, "focus_databases", "Focus databases"),
        Binding(keys.focus_tables, "focus_tables", "Focus tables"),
        Binding(keys.focus_query, "focus_query", "Focus query"),
        Binding(keys.focus_output, "focus_output", "Focus output"),
        Binding(keys.toggle_connections, "toggle_connections", "Toggle connections"),
        Binding(keys.toggle_databases, "toggle_databases", "Toggle databases"),
        Binding(keys.toggle_tables, "toggle_tables", "Toggle tables"),
        Binding(keys.toggle_query, "toggle_query", "Toggle query"),
        Binding(keys.toggle_output, "toggle_output", "Toggle output"),
    ]


def binding_keys(binding: Binding) -> List[str]:
    if binding.key == ",":
        return [","]
    return [part.strip() for part in binding.key.split(",") if part.strip()]


def find_action(bindings: Iterable[Binding], key: KeyInput) -> Optional[str]:
    """Return the action bound to ``key``, or ``None`` when nothing matches."""

    name = key.key
    for binding in bindings:
        if name in binding_keys(binding):
            return binding.action
    return None


__all__ = [
    "CONNECTION_KEYS",
    "DIALOG_KEYS",
    "GRID_KEYS",
    "LIST_KEYS",
    "QUERY_KEYS",
    "binding_keys",
    "find_action",
    "global_bindings",
]
