"""Sidebar lists and the query editor."""
from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import ValidationError
from rich.cells import set_cell_size
from rich.console import RenderableType
from rich.text import Text

from lazytables.core.connections import DEFAULT_PORTS, ConnectionDescriptor, ConnectionStore
from lazytables.integration.database import DatabaseAdapter, with_timeout
from lazytables.utils.errors import ConnectionStoreError, DatabaseError
from lazytables.utils.logging import get_logger

from .commands import Command, Perform, batch, emit
from .dialog import DialogField, InputDialog
from .grid import scroll_to_keep_visible
from .hotkeys import CONNECTION_KEYS, LIST_KEYS, QUERY_KEYS, find_action
from .messages import (
    ConnectionDeleted,
    ConnectionSelected,
    DatabaseSelected,
    DatabasesLoaded,
    DialogResult,
    KeyInput,
    Message,
    NotificationKind,
    OperationFailed,
    QueryExecuted,
    TableListLoaded,
    TableSelected,
)
from .notifications import NotificationManager
from .panel import Panel, PanelId
from .styles import DIALOG_CURSOR, LIST_CURSOR, LIST_CURSOR_BLURRED, LIST_DETAIL, PLACEHOLDER

logger = get_logger(__name__)

ADD_CONNECTION_DIALOG = "add_connection"
QUERY_PLACEHOLDER = "Type SQL query here..."
TABLE_QUERY_TEMPLATE = "SELECT * FROM {table} LIMIT 100"

notify = NotificationManager.request


class ListPanel(Panel):
    """Scrollable single-selection list."""

    keymap = LIST_KEYS
    empty_text = "Nothing to show"

    def __init__(self) -> None:
        super().__init__()
        self.items: List[str] = []
        self.cursor = 0
        self.offset = 0

    def set_items(self, items: List[str]) -> None:
        self.items = list(items)
        self.cursor = min(self.cursor, max(0, len(self.items) - 1))
        self.offset = 0
        self._scroll()

    def detail(self, index: int) -> Optional[str]:
        return None

    @property
    def rows_per_item(self) -> int:
        return 1

    def _scroll(self) -> None:
        visible = max(1, self.inner_height // self.rows_per_item)
        self.offset = scroll_to_keep_visible(self.cursor, self.offset, visible)

    def move_cursor(self, delta: int) -> None:
        if not self.items:
            return
        self.cursor = min(max(self.cursor + delta, 0), len(self.items) - 1)
        self._scroll()

    def set_size(self, width: int, height: int) -> None:
        super().set_size(width, height)
        self._scroll()

    def action_cursor_up(self) -> None:
        self.move_cursor(-1)

    def action_cursor_down(self) -> None:
        self.move_cursor(1)

    def action_cursor_top(self) -> None:
        self.move_cursor(-len(self.items))

    def action_cursor_bottom(self) -> None:
        self.move_cursor(len(self.items))

    def action_select(self) -> Optional[Command]:
        if not self.items:
            return None
        return self.select(self.cursor)

    def select(self, index: int) -> Optional[Command]:
        raise NotImplementedError

    def render_items(self) -> Text:
        body = Text(no_wrap=True, overflow="crop", end="")
        width = self.inner_width
        if width <= 0:
            return body
        if not self.items:
            body.append(self.empty_text, style=PLACEHOLDER)
            return body
        visible = max(1, self.inner_height // self.rows_per_item)
        shown = range(self.offset, min(len(self.items), self.offset + visible))
        for index in shown:
            if index != shown.start:
                body.append("\n")
            label = set_cell_size(f" {self.items[index]}", width)
            if index == self.cursor:
                body.append(label, style=LIST_CURSOR if self.focused else LIST_CURSOR_BLURRED)
            else:
                body.append(label)
            detail = self.detail(index)
            if detail is not None:
                body.append("\n")
                body.append(set_cell_size(f"   {detail}", width), style=LIST_DETAIL)
        return body

    def view(self) -> RenderableType:
        subtitle = f" {self.cursor + 1}/{len(self.items)} " if self.items else None
        return self.frame(self.render_items(), subtitle=subtitle)


class ConnectionListPanel(ListPanel):
    """Saved connections with an add-connection form."""

    panel_id = PanelId.CONNECTIONS
    title = "Connections"
    keymap = CONNECTION_KEYS
    subscriptions = frozenset({DialogResult})
    empty_text = "No connections (press a to add)"

    def __init__(self, store: ConnectionStore) -> None:
        super().__init__()
        self.store = store
        self.connections: List[ConnectionDescriptor] = []
        self.dialog: Optional[InputDialog] = None

    @property
    def rows_per_item(self) -> int:
        return 2

    @property
    def captures_input(self) -> bool:
        return self.dialog is not None

    def modal(self) -> Optional[InputDialog]:
        return self.dialog

    def init(self) -> Optional[Command]:
        try:
            self._set_connections(self.store.load_connections())
        except ConnectionStoreError as exc:
            logger.error("failed to load connections: %s", exc, extra={"panel": self.panel_id.value})
            return notify(NotificationKind.ERROR, "Could not load connections", str(exc))
        return None

    def _set_connections(self, connections: List[ConnectionDescriptor]) -> None:
        self.connections = list(connections)
        self.set_items([item.name for item in self.connections])

    def detail(self, index: int) -> Optional[str]:
        return self.connections[index].describe()

    def handle_key(self, key: KeyInput) -> Optional[Command]:
        if self.dialog is not None:
            return self.dialog.handle_key(key)
        return super().handle_key(key)

    def select(self, index: int) -> Optional[Command]:
        connection = self.connections[index]
        return emit(ConnectionSelected(connection.id, connection.name, connection.kind))

    def action_add(self) -> None:
        self.dialog = InputDialog(
            ADD_CONNECTION_DIALOG,
            "Add Connection",
            [
                DialogField("Name", placeholder="My Connection", required=True),
                DialogField("Type", placeholder="postgres, mysql, or sqlite"),
                DialogField("Host", placeholder="localhost"),
                DialogField("Port", placeholder="5432"),
                DialogField("Username", placeholder="postgres"),
                DialogField("Password", placeholder="Enter password", secret=True),
                DialogField("Database", placeholder="postgres"),
            ],
        )

    def action_delete(self) -> Optional[Command]:
        if not self.connections:
            return None
        connection = self.connections[self.cursor]
        try:
            self.store.delete_connection(connection.id)
        except ConnectionStoreError as exc:
            return notify(NotificationKind.ERROR, "Could not delete connection", str(exc))
        self._set_connections([item for item in self.connections if item.id != connection.id])
        return batch(
            emit(ConnectionDeleted(connection.id)),
            notify(NotificationKind.INFO, "Connection deleted", connection.name),
        )

    def handle_message(self, message: Message) -> Optional[Command]:
        if isinstance(message, DialogResult) and message.dialog_id == ADD_CONNECTION_DIALOG:
            self.dialog = None
            if not message.confirmed:
                return None
            return self.add_connection(message.fields)
        return None

    def add_connection(self, fields: dict) -> Optional[Command]:
        kind = (fields.get("Type") or "postgres").strip().lower()
        port_text = (fields.get("Port") or "").strip()
        try:
            descriptor = ConnectionDescriptor(
                id=self.store.next_id(),
                name=fields.get("Name", "").strip(),
                kind=kind,
                host=(fields.get("Host") or "localhost").strip(),
                port=int(port_text) if port_text else DEFAULT_PORTS.get(kind),
                username=(fields.get("Username") or "").strip(),
                password=fields.get("Password") or None,
                database=(fields.get("Database") or "").strip(),
            )
        except (ValueError, ValidationError) as exc:
            return notify(NotificationKind.ERROR, "Invalid connection", _first_error(exc))
        except ConnectionStoreError as exc:
            return notify(NotificationKind.ERROR, "Could not save connection", str(exc))
        try:
            self.store.save_connection(descriptor)
        except ConnectionStoreError as exc:
            return notify(NotificationKind.ERROR, "Could not save connection", str(exc))
        self._set_connections([*self.connections, descriptor])
        self.cursor = len(self.connections) - 1
        self._scroll()
        return notify(NotificationKind.SUCCESS, "Connection added", descriptor.name)


def _first_error(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error.get("loc", ()))
        return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))
    return str(exc)


class DatabaseListPanel(ListPanel):
    """Databases of the selected connection."""

    panel_id = PanelId.DATABASES
    title = "Databases"
    subscriptions = frozenset({ConnectionSelected, ConnectionDeleted, DatabasesLoaded, OperationFailed})

    def __init__(self, adapter: DatabaseAdapter, store: ConnectionStore, *, timeout: float = 10.0) -> None:
        super().__init__()
        self.adapter = adapter
        self.store = store
        self.timeout = timeout
        self.connection_id: Optional[str] = None
        self.loading = False

    @property
    def empty_text(self) -> str:
        if self.connection_id is None:
            return "No connection selected"
        return "Loading..." if self.loading else "No databases"

    def handle_message(self, message: Message) -> Optional[Command]:
        if isinstance(message, ConnectionSelected):
            self.connection_id = message.connection_id
            self.cursor = 0
            self.set_items([])
            return self.load(message.connection_id)
        if isinstance(message, DatabasesLoaded):
            if message.connection_id == self.connection_id:
                self.loading = False
                self.set_items(list(message.databases))
        elif isinstance(message, OperationFailed):
            if message.operation == "list databases":
                self.loading = False
        elif isinstance(message, ConnectionDeleted):
            if message.connection_id == self.connection_id:
                self.connection_id = None
                self.loading = False
                self.set_items([])
        return None

    def load(self, connection_id: str) -> Command:
        self.loading = True
        adapter, store, timeout = self.adapter, self.store, self.timeout

        async def list_databases() -> Message:
            connection = store.get_connection(connection_id)
            if connection is None:
                return OperationFailed("list databases", f"Unknown connection {connection_id}")
            try:
                databases = await with_timeout(adapter.list_databases(connection), timeout, "Listing databases")
            except DatabaseError as exc:
                return OperationFailed("list databases", str(exc))
            return DatabasesLoaded(connection_id, tuple(databases))

        return Perform(list_databases, "list databases")

    def select(self, index: int) -> Optional[Command]:
        return emit(DatabaseSelected(self.items[index]))


class TableListPanel(ListPanel):
    """Tables of the selected database."""

    panel_id = PanelId.TABLES
    title = "Tables"
    subscriptions = frozenset(
        {ConnectionSelected, ConnectionDeleted, DatabaseSelected, TableListLoaded, OperationFailed}
    )

    def __init__(self, adapter: DatabaseAdapter, store: ConnectionStore, *, timeout: float = 30.0) -> None:
        super().__init__()
        self.adapter = adapter
        self.store = store
        self.timeout = timeout
        self.connection_id: Optional[str] = None
        self.database: Optional[str] = None
        self.loading = False

    @property
    def empty_text(self) -> str:
        if self.database is None:
            return "No database selected"
        return "Loading..." if self.loading else "No tables"

    def _clear(self) -> None:
        self.database = None
        self.loading = False
        self.cursor = 0
        self.set_items([])

    def handle_message(self, message: Message) -> Optional[Command]:
        if isinstance(message, ConnectionSelected):
            self.connection_id = message.connection_id
            self._clear()
        elif isinstance(message, ConnectionDeleted):
            if message.connection_id == self.connection_id:
                self.connection_id = None
                self._clear()
        elif isinstance(message, DatabaseSelected):
            self.database = message.name
            self.cursor = 0
            self.set_items([])
            return self.load(message.name)
        elif isinstance(message, TableListLoaded):
            if (message.connection_id, message.database) == (self.connection_id, self.database):
                self.loading = False
                self.set_items(list(message.tables))
        elif isinstance(message, OperationFailed):
            if message.operation == "list tables":
                self.loading = False
        return None

    def load(self, database: str) -> Optional[Command]:
        if self.connection_id is None:
            return None
        self.loading = True
        adapter, store, timeout = self.adapter, self.store, self.timeout
        connection_id = self.connection_id

        async def list_tables() -> Message:
            connection = store.get_connection(connection_id)
            if connection is None:
                return OperationFailed("list tables", f"Unknown connection {connection_id}")
            try:
                tables = await with_timeout(adapter.list_tables(connection, database), timeout, "Listing tables")
            except DatabaseError as exc:
                return OperationFailed("list tables", str(exc))
            return TableListLoaded(connection_id, database, tuple(tables))

        return Perform(list_tables, "list tables")

    def select(self, index: int) -> Optional[Command]:
        return emit(TableSelected(self.items[index]))


class TextBuffer:
    """Multi-line text with a (row, column) cursor."""

    def __init__(self, text: str = "") -> None:
        self.set_text(text)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def set_text(self, text: str) -> None:
        self.lines = text.split("\n") if text else [""]
        self.row = len(self.lines) - 1
        self.col = len(self.lines[-1])

    def is_empty(self) -> bool:
        return not self.text.strip()

    def insert(self, text: str) -> None:
        for index, chunk in enumerate(text.split("\n")):
            if index:
                self.newline()
            line = self.lines[self.row]
            self.lines[self.row] = line[: self.col] + chunk + line[self.col :]
            self.col += len(chunk)

    def newline(self) -> None:
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col]
        self.lines.insert(self.row + 1, line[self.col :])
        self.row += 1
        self.col = 0

    def backspace(self) -> None:
        if self.col > 0:
            line = self.lines[self.row]
            self.lines[self.row] = line[: self.col - 1] + line[self.col :]
            self.col -= 1
        elif self.row > 0:
            previous = self.lines[self.row - 1]
            self.lines[self.row - 1] = previous + self.lines.pop(self.row)
            self.row -= 1
            self.col = len(previous)

    def delete(self) -> None:
        line = self.lines[self.row]
        if self.col < len(line):
            self.lines[self.row] = line[: self.col] + line[self.col + 1 :]
        elif self.row < len(self.lines) - 1:
            self.lines[self.row] = line + self.lines.pop(self.row + 1)

    def move(self, d_row: int, d_col: int) -> None:
        if d_row:
            self.row = min(max(self.row + d_row, 0), len(self.lines) - 1)
            self.col = min(self.col, len(self.lines[self.row]))
        if d_col < 0 and self.col == 0 and self.row > 0:
            self.row -= 1
            self.col = len(self.lines[self.row])
        elif d_col > 0 and self.col == len(self.lines[self.row]) and self.row < len(self.lines) - 1:
            self.row += 1
            self.col = 0
        elif d_col:
            self.col = min(max(self.col + d_col, 0), len(self.lines[self.row]))

    def handle_key(self, key: KeyInput) -> bool:
        name = key.key
        if name == "enter":
            self.newline()
        elif name == "backspace":
            self.backspace()
        elif name == "delete":
            self.delete()
        elif name == "left":
            self.move(0, -1)
        elif name == "right":
            self.move(0, 1)
        elif name == "up":
            self.move(-1, 0)
        elif name == "down":
            self.move(1, 0)
        elif name == "home":
            self.col = 0
        elif name == "end":
            self.col = len(self.lines[self.row])
        elif name == "ctrl+u":
            self.lines[self.row] = self.lines[self.row][self.col :]
            self.col = 0
        elif key.character is not None:
            self.insert(key.character)
        else:
            return False
        return True


class QueryEditorPanel(Panel):
    """SQL editor that executes through the database adapter."""

    panel_id = PanelId.QUERY
    title = "Query"
    keymap = QUERY_KEYS
    subscriptions = frozenset({ConnectionSelected, ConnectionDeleted, DatabaseSelected, TableSelected})

    def __init__(
        self, adapter: DatabaseAdapter, store: ConnectionStore, *, history_limit: int = 100, timeout: float = 30.0
    ) -> None:
        super().__init__()
        self.adapter = adapter
        self.store = store
        self.timeout = timeout
        self.buffer = TextBuffer()
        self.history: List[str] = []
        self.history_limit = history_limit
        self.history_index: Optional[int] = None
        self._draft = ""
        self.connection_id: Optional[str] = None
        self.database: Optional[str] = None
        self.row_offset = 0
        self.col_offset = 0

    @property
    def captures_input(self) -> bool:
        return True

    def handle_key(self, key: KeyInput) -> Optional[Command]:
        if find_action(self.keymap, key) is not None:
            return super().handle_key(key)
        if self.buffer.handle_key(key):
            self.history_index = None
            self._scroll()
        return None

    def handle_message(self, message: Message) -> Optional[Command]:
        if isinstance(message, ConnectionSelected):
            self.connection_id = message.connection_id
            self.database = None
        elif isinstance(message, ConnectionDeleted):
            if message.connection_id == self.connection_id:
                self.connection_id = None
                self.database = None
        elif isinstance(message, DatabaseSelected):
            self.database = message.name
        elif isinstance(message, TableSelected):
            if self.buffer.is_empty():
                self.buffer.set_text(TABLE_QUERY_TEMPLATE.format(table=message.name))
                self._scroll()
        return None

    def remember(self, query: str) -> None:
        if self.history and self.history[-1] == query:
            return
        self.history.append(query)
        del self.history[: -self.history_limit]

    def action_execute(self) -> Optional[Command]:
        query = self.buffer.text.strip()
        if not query:
            return notify(NotificationKind.WARNING, "Nothing to execute", "The query editor is empty")
        if self.connection_id is None:
            return notify(NotificationKind.WARNING, "No connection selected", "Select a connection first")
        self.remember(query)
        self.history_index = None
        adapter, store, timeout = self.adapter, self.store, self.timeout
        connection_id, database = self.connection_id, self.database

        async def execute_query() -> Message:
            connection = store.get_connection(connection_id)
            if connection is None:
                return OperationFailed("execute query", f"Unknown connection {connection_id}")
            if database:
                connection = connection.model_copy(update={"database": database})
            try:
                result = await with_timeout(adapter.execute_query(connection, query), timeout, "Query")
            except DatabaseError as exc:
                return OperationFailed("execute query", str(exc))
            return QueryExecuted(query, result)

        return Perform(execute_query, "execute query")

    def action_history_previous(self) -> None:
        if not self.history:
            return
        if self.history_index is None:
            self._draft = self.buffer.text
            self.history_index = len(self.history) - 1
        else:
            self.history_index = max(0, self.history_index - 1)
        self.buffer.set_text(self.history[self.history_index])
        self._scroll()

    def action_history_next(self) -> None:
        if self.history_index is None:
            return
        if self.history_index < len(self.history) - 1:
            self.history_index += 1
            self.buffer.set_text(self.history[self.history_index])
        else:
            self.history_index = None
            self.buffer.set_text(self._draft)
        self._scroll()

    def action_clear(self) -> None:
        self.buffer.set_text("")
        self.history_index = None
        self._scroll()

    def set_size(self, width: int, height: int) -> None:
        super().set_size(width, height)
        self._scroll()

    def _scroll(self) -> None:
        self.row_offset = scroll_to_keep_visible(self.buffer.row, self.row_offset, max(1, self.inner_height))
        self.col_offset = scroll_to_keep_visible(self.buffer.col, self.col_offset, max(1, self.inner_width))

    def _visible_lines(self) -> List[Tuple[int, str]]:
        end = self.row_offset + max(0, self.inner_height)
        return list(enumerate(self.buffer.lines))[self.row_offset : end]

    def view(self) -> RenderableType:
        body = Text(no_wrap=True, overflow="crop", end="")
        width = self.inner_width
        if width > 0 and self.inner_height > 0:
            if self.buffer.text == "" and not self.focused:
                body.append(QUERY_PLACEHOLDER, style=PLACEHOLDER)
            else:
                for position, (row, line) in enumerate(self._visible_lines()):
                    if position:
                        body.append("\n")
                    shown = line[self.col_offset : self.col_offset + width]
                    if self.focused and row == self.buffer.row:
                        cursor = self.buffer.col - self.col_offset
                        body.append(shown[:cursor])
                        body.append(shown[cursor : cursor + 1] or " ", style=DIALOG_CURSOR)
                        body.append(shown[cursor + 1 :])
                    else:
                        body.append(shown)
        return self.frame(body, subtitle=" ctrl+e run ")


__all__ = [
    "ADD_CONNECTION_DIALOG",
    "ConnectionListPanel",
    "DatabaseListPanel",
    "ListPanel",
    "QueryEditorPanel",
    "TableListPanel",
    "TextBuffer",
]
