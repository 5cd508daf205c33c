from __future__ import annotations

from datetime import datetime, timedelta

from rich.console import Console

from lazytables.ui_tui.commands import ScheduleTick
from lazytables.ui_tui.loop import ManualScheduler, MessageLoop
from lazytables.ui_tui.messages import (
    ConnectionDeleted,
    ConnectionSelected,
    DatabaseSelected,
    FocusChanged,
    TableSelected,
    Tick,
)
from lazytables.ui_tui.shell import Shell
from lazytables.ui_tui.status import NO_CONNECTION, NO_DATABASE, NO_TABLE, StatusBarPanel

START = datetime(2024, 1, 1, 12, 0, 0)


def _status() -> StatusBarPanel:
    status = StatusBarPanel(clock=lambda: START)
    status.set_size(120, 1)
    return status


def _plain(status: StatusBarPanel) -> str:
    console = Console(width=status.width)
    with console.capture() as capture:
        console.print(status.view())
    return capture.get()


def test_init_schedules_a_single_tick() -> None:
    status = _status()
    assert status.init() == ScheduleTick(1.0)
    assert status.init() is None


def test_tick_updates_clock_and_renews() -> None:
    status = _status()
    later = START + timedelta(seconds=5)
    assert status.update(Tick(later)) == ScheduleTick(1.0)
    assert status.current_time == later
    assert "2024-01-01 12:00:05" in _plain(status)


def test_selection_resets_downstream_fields() -> None:
    status = _status()
    status.update(ConnectionSelected("conn_1", "Local", "postgres"))
    status.update(DatabaseSelected("app_db"))
    status.update(TableSelected("users"))
    assert (status.connection, status.database, status.table) == ("Local", "app_db", "users")

    status.update(DatabaseSelected("analytics"))
    assert (status.database, status.table) == ("analytics", NO_TABLE)

    status.update(TableSelected("orders"))
    status.update(ConnectionSelected("conn_2", "Remote", "mysql"))
    assert (status.connection, status.database, status.table) == ("Remote", NO_DATABASE, NO_TABLE)


def test_deleting_active_connection_resets_everything() -> None:
    status = _status()
    status.update(ConnectionSelected("conn_1", "Local", "postgres"))
    status.update(DatabaseSelected("app_db"))
    status.update(ConnectionDeleted("conn_9"))
    assert status.connection == "Local"
    status.update(ConnectionDeleted("conn_1"))
    assert (status.connection, status.database, status.table) == (NO_CONNECTION, NO_DATABASE, NO_TABLE)
    assert status.connection_id is None


def test_view_shows_focus_and_active_items() -> None:
    status = _status()
    status.update(FocusChanged("output"))
    text = _plain(status)
    assert "Panel: output" in text
    assert "Connection: No connection" in text
    assert "DB:" not in text
    status.update(ConnectionSelected("conn_1", "Local", "postgres"))
    status.update(DatabaseSelected("app_db"))
    text = _plain(status)
    assert "DB: app_db" in text
    assert "Table: No table active" in text
    assert text.rstrip().endswith("12:00:00")


def test_clock_advances_through_the_loop() -> None:
    scheduler = ManualScheduler(start=START)
    shell = Shell(clock=scheduler.now)
    status = StatusBarPanel(clock=scheduler.now)
    shell.register([status])
    loop = MessageLoop(shell, scheduler)
    loop.start()
    assert scheduler.pending_timers == 1
    scheduler.advance(3)
    assert status.current_time == START + timedelta(seconds=3)
    assert scheduler.pending_timers == 1
