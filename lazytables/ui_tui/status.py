"""Bottom status line."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from rich.cells import cell_len
from rich.console import RenderableType
from rich.text import Text

from .commands import Command, ScheduleTick
from .messages import (
    ConnectionDeleted,
    ConnectionSelected,
    DatabaseSelected,
    FocusChanged,
    Message,
    TableSelected,
    Tick,
)
from .panel import Panel, PanelId
from .styles import STATUS_CLOCK, STATUS_FOCUS, STATUS_INFO

NO_CONNECTION = "No connection"
NO_DATABASE = "No DB active"
NO_TABLE = "No table active"
TICK_INTERVAL = 1.0


class StatusBarPanel(Panel):
    """Shows focus, the active connection/database/table and a clock.

    The clock renews itself: :meth:`init` schedules the first tick and every
    :class:`Tick` schedules the next one.
    """

    panel_id = PanelId.STATUS
    title = "Status"
    focusable = False
    subscriptions = frozenset(
        {ConnectionSelected, ConnectionDeleted, DatabaseSelected, TableSelected, FocusChanged, Tick}
    )

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        super().__init__()
        self.focused_panel = PanelId.CONNECTIONS.value
        self.connection_id: Optional[str] = None
        self.connection = NO_CONNECTION
        self.database = NO_DATABASE
        self.table = NO_TABLE
        self.current_time = clock()
        self._started = False

    def init(self) -> Optional[Command]:
        if self._started:
            return None
        self._started = True
        return ScheduleTick(TICK_INTERVAL)

    def handle_message(self, message: Message) -> Optional[Command]:
        if isinstance(message, Tick):
            self.current_time = message.time
            return ScheduleTick(TICK_INTERVAL)
        if isinstance(message, FocusChanged):
            self.focused_panel = message.panel_id
        elif isinstance(message, ConnectionSelected):
            self.connection_id = message.connection_id
            self.connection = message.name
            self.database = NO_DATABASE
            self.table = NO_TABLE
        elif isinstance(message, ConnectionDeleted):
            if message.connection_id == self.connection_id:
                self.reset()
        elif isinstance(message, DatabaseSelected):
            self.database = message.name
            self.table = NO_TABLE
        elif isinstance(message, TableSelected):
            self.table = message.name
        return None

    def reset(self) -> None:
        self.connection_id = None
        self.connection = NO_CONNECTION
        self.database = NO_DATABASE
        self.table = NO_TABLE

    def view(self) -> RenderableType:
        line = Text(no_wrap=True, overflow="crop", end="")
        if self.width <= 0 or self.height <= 0:
            return line
        line.append(f" Panel: {self.focused_panel} ", style=STATUS_FOCUS)
        line.append(f" Connection: {self.connection} ", style=STATUS_INFO)
        if self.connection_id is not None:
            line.append(f" DB: {self.database} ", style=STATUS_INFO)
        if self.database != NO_DATABASE:
            line.append(f" Table: {self.table} ", style=STATUS_INFO)
        clock = f" {self.current_time:%Y-%m-%d %H:%M:%S} "
        spacer = self.width - cell_len(line.plain) - cell_len(clock)
        if spacer > 0:
            line.append(" " * spacer)
            line.append(clock, style=STATUS_CLOCK)
        return line


__all__ = ["StatusBarPanel"]
