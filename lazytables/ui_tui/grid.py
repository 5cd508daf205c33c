"""Virtualized result grid.

Only the window ``[offset, offset + visible)`` of each axis is rendered, so a
result of any size costs the same to draw. The selection is a single cell and
the window follows it with the smallest scroll that keeps it in view.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from rich.cells import cell_len, set_cell_size
from rich.console import RenderableType
from rich.text import Text

from lazytables.utils.logging import get_logger

from .commands import Command
from .hotkeys import GRID_KEYS
from .messages import QueryExecuted
from .panel import Panel, PanelId
from .styles import (
    GRID_CELL_SELECTED,
    GRID_CELL_SELECTED_BLURRED,
    GRID_HEADER,
    GRID_HEADER_SELECTED,
    GRID_MESSAGE,
    GRID_ROW_SELECTED,
    GRID_SEPARATOR,
    PLACEHOLDER,
)

logger = get_logger(__name__)

DEFAULT_CELL_WIDTH = 15
COLUMN_SEPARATOR = "│"
# header line and rule above the rows, result message below them
HEADER_ROWS = 2
FOOTER_ROWS = 1
# left/right gutter inside the viewport
GUTTER = 2
EMPTY_PLACEHOLDER = "No results to display"
ELLIPSIS = "..."


def visible_columns(viewport_width: int, cell_width: int) -> int:
    return max(1, (viewport_width - GUTTER) // (cell_width + len(COLUMN_SEPARATOR)))


def visible_rows(viewport_height: int) -> int:
    return max(1, viewport_height - HEADER_ROWS - FOOTER_ROWS)


def scroll_to_keep_visible(selected: int, offset: int, visible: int) -> int:
    """Return the offset closest to ``offset`` that shows ``selected``."""

    if selected < offset:
        return selected
    if selected >= offset + visible:
        return selected - visible + 1
    return offset


def fit_cell(value: Any, width: int) -> str:
    """Render ``value`` into exactly ``width`` cells, truncating with an ellipsis."""

    text = "NULL" if value is None else str(value)
    text = text.replace("\n", " ").replace("\t", " ")
    if cell_len(text) > width:
        if width > len(ELLIPSIS):
            text = set_cell_size(text, width - len(ELLIPSIS)) + ELLIPSIS
        else:
            text = set_cell_size(text, width)
    return set_cell_size(text, width)


@dataclass
class GridViewState:
    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    selected_row: int = 0
    selected_col: int = 0
    row_offset: int = 0
    col_offset: int = 0
    cell_width: int = DEFAULT_CELL_WIDTH
    message: str = ""
    viewport_width: int = 0
    viewport_height: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.columns or not self.rows

    @property
    def visible_cols(self) -> int:
        return visible_columns(self.viewport_width, self.cell_width)

    @property
    def visible_rows(self) -> int:
        return visible_rows(self.viewport_height)

    def load_result(self, columns: Sequence[str], rows: Sequence[Sequence[Any]], message: str = "") -> None:
        self.columns = list(columns)
        self.rows = [list(row) for row in rows]
        self.message = message
        self.selected_row = self.selected_col = 0
        self.row_offset = self.col_offset = 0

    def move_selection(self, d_row: int, d_col: int) -> None:
        if self.is_empty:
            return
        self.move_to(row=self.selected_row + d_row, col=self.selected_col + d_col)

    def move_to(self, *, row: Optional[int] = None, col: Optional[int] = None) -> None:
        if self.is_empty:
            return
        if row is not None:
            self.selected_row = min(max(row, 0), len(self.rows) - 1)
        if col is not None:
            self.selected_col = min(max(col, 0), len(self.columns) - 1)
        self.ensure_visible()

    def ensure_visible(self) -> None:
        if self.is_empty:
            self.row_offset = self.col_offset = 0
            return
        self.row_offset = max(0, scroll_to_keep_visible(self.selected_row, self.row_offset, self.visible_rows))
        self.col_offset = max(0, scroll_to_keep_visible(self.selected_col, self.col_offset, self.visible_cols))

    def resize(self, viewport_width: int, viewport_height: int) -> None:
        self.viewport_width = max(0, viewport_width)
        self.viewport_height = max(0, viewport_height)
        self.ensure_visible()

    def window(self) -> tuple[range, range]:
        """Return the row and column indices currently on screen."""

        rows = range(self.row_offset, min(len(self.rows), self.row_offset + self.visible_rows))
        cols = range(self.col_offset, min(len(self.columns), self.col_offset + self.visible_cols))
        return rows, cols

    def cell(self, row: int, col: int) -> Any:
        values = self.rows[row]
        # short rows render their missing trailing cells blank
        return values[col] if col < len(values) else ""


class DataGridPanel(Panel):
    """Output panel showing the latest query result."""

    panel_id = PanelId.OUTPUT
    title = "Output"
    subscriptions = frozenset({QueryExecuted})
    keymap = GRID_KEYS

    def __init__(self, *, cell_width: int = DEFAULT_CELL_WIDTH) -> None:
        super().__init__()
        self.state = GridViewState(cell_width=cell_width)

    def load_result(self, columns: Sequence[str], rows: Sequence[Sequence[Any]], message: str = "") -> None:
        self.state.load_result(columns, rows, message)
        logger.debug(
            "grid loaded %d rows x %d columns",
            len(self.state.rows),
            len(self.state.columns),
            extra={"panel": self.panel_id.value},
        )

    def move_selection(self, d_row: int, d_col: int) -> None:
        self.state.move_selection(d_row, d_col)

    def ensure_visible(self) -> None:
        self.state.ensure_visible()

    def set_size(self, width: int, height: int) -> None:
        super().set_size(width, height)
        self.state.resize(self.inner_width, self.inner_height)

    def handle_message(self, message) -> Optional[Command]:
        if isinstance(message, QueryExecuted):
            result = message.result
            self.load_result(result.columns, result.rows, result.message)
        return None

    def action_move_up(self) -> None:
        self.move_selection(-1, 0)

    def action_move_down(self) -> None:
        self.move_selection(1, 0)

    def action_move_left(self) -> None:
        self.move_selection(0, -1)

    def action_move_right(self) -> None:
        self.move_selection(0, 1)

    def action_first_row(self) -> None:
        self.state.move_to(row=0)

    def action_last_row(self) -> None:
        self.state.move_to(row=len(self.state.rows) - 1)

    def action_page_up(self) -> None:
        self.move_selection(-self.state.visible_rows, 0)

    def action_page_down(self) -> None:
        self.move_selection(self.state.visible_rows, 0)

    def render_body(self) -> Text:
        state = self.state
        body = Text(no_wrap=True, overflow="crop", end="")
        if state.viewport_width <= 0 or state.viewport_height <= 0:
            return body
        if state.is_empty:
            body.append(EMPTY_PLACEHOLDER, style=PLACEHOLDER)
            if state.message:
                body.append("\n")
                body.append(state.message, style=GRID_MESSAGE)
            return body

        row_range, col_range = state.window()
        width = state.cell_width
        for col in col_range:
            if col != col_range.start:
                body.append(COLUMN_SEPARATOR, style=GRID_SEPARATOR)
            header = set_cell_size(fit_cell(state.columns[col], width).strip().center(width), width)
            selected = col == state.selected_col and self.focused
            body.append(header, style=GRID_HEADER_SELECTED if selected else GRID_HEADER)
        body.append("\n")
        body.append("─" * state.viewport_width, style=GRID_SEPARATOR)

        for row in row_range:
            body.append("\n")
            on_row = row == state.selected_row
            for col in col_range:
                if col != col_range.start:
                    body.append(COLUMN_SEPARATOR, style=GRID_ROW_SELECTED if on_row else GRID_SEPARATOR)
                style = None
                if on_row and col == state.selected_col:
                    style = GRID_CELL_SELECTED if self.focused else GRID_CELL_SELECTED_BLURRED
                elif on_row:
                    style = GRID_ROW_SELECTED
                body.append(fit_cell(state.cell(row, col), width), style=style)

        padding = state.visible_rows - len(row_range)
        body.append("\n" * (padding + 1))
        body.append(state.message, style=GRID_MESSAGE)
        return body

    def view(self) -> RenderableType:
        subtitle = None
        if not self.state.is_empty:
            subtitle = f" {self.state.selected_row + 1}/{len(self.state.rows)} "
        return self.frame(self.render_body(), subtitle=subtitle)


__all__ = [
    "DataGridPanel",
    "GridViewState",
    "fit_cell",
    "scroll_to_keep_visible",
    "visible_columns",
    "visible_rows",
]
