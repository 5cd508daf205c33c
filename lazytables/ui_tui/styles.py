"""Fixed style constants shared by the panels."""
from __future__ import annotations

from typing import Dict

from rich.style import Style

from .messages import NotificationKind

BORDER_FOCUSED = Style(color="bright_blue")
BORDER_BLURRED = Style(color="bright_black")
TITLE_FOCUSED = Style(color="bright_blue", bold=True)

LIST_CURSOR = Style(color="bright_white", bgcolor="blue", bold=True)
LIST_CURSOR_BLURRED = Style(color="bright_white", bgcolor="bright_black")
LIST_DETAIL = Style(color="white", dim=True)
PLACEHOLDER = Style(color="bright_black", italic=True)

GRID_HEADER = Style(bold=True)
GRID_HEADER_SELECTED = Style(color="bright_cyan", bold=True, underline=True)
GRID_CELL_SELECTED = Style(color="bright_white", bgcolor="blue", bold=True)
GRID_CELL_SELECTED_BLURRED = Style(reverse=True)
GRID_ROW_SELECTED = Style(color="bright_white", bgcolor="bright_black")
GRID_SEPARATOR = Style(color="bright_black")
GRID_MESSAGE = Style(color="bright_cyan", italic=True)

STATUS_FOCUS = Style(color="bright_white", bgcolor="blue", bold=True)
STATUS_INFO = Style(color="bright_white", bgcolor="bright_black")
STATUS_CLOCK = Style(color="white")

DIALOG_BORDER = Style(color="bright_blue")
DIALOG_LABEL = Style(bold=True)
DIALOG_LABEL_ACTIVE = Style(color="bright_blue", bold=True)
DIALOG_INPUT = Style(color="bright_white")
DIALOG_CURSOR = Style(reverse=True)
DIALOG_ERROR = Style(color="bright_red")
DIALOG_HINT = Style(color="bright_black", italic=True)

NOTIFICATION_BORDERS: Dict[NotificationKind, Style] = {
    NotificationKind.INFO: Style(color="bright_blue"),
    NotificationKind.ERROR: Style(color="bright_red"),
    NotificationKind.WARNING: Style(color="bright_yellow"),
    NotificationKind.SUCCESS: Style(color="bright_green"),
}

NOTIFICATION_ICONS: Dict[NotificationKind, str] = {
    NotificationKind.INFO: "i",
    NotificationKind.ERROR: "x",
    NotificationKind.WARNING: "!",
    NotificationKind.SUCCESS: "+",
}


__all__ = [
    "BORDER_BLURRED",
    "BORDER_FOCUSED",
    "DIALOG_BORDER",
    "DIALOG_CURSOR",
    "DIALOG_ERROR",
    "DIALOG_HINT",
    "DIALOG_INPUT",
    "DIALOG_LABEL",
    "DIALOG_LABEL_ACTIVE",
    "GRID_CELL_SELECTED",
    "GRID_CELL_SELECTED_BLURRED",
    "GRID_HEADER",
    "GRID_HEADER_SELECTED",
    "GRID_MESSAGE",
    "GRID_ROW_SELECTED",
    "GRID_SEPARATOR",
    "LIST_CURSOR",
    "LIST_CURSOR_BLURRED",
    "LIST_DETAIL",
    "NOTIFICATION_BORDERS",
    "NOTIFICATION_ICONS",
    "PLACEHOLDER",
    "STATUS_CLOCK",
    "STATUS_FOCUS",
    "STATUS_INFO",
    "TITLE_FOCUSED",
]
