from __future__ import annotations

from pathlib import Path

import pytest

from lazytables.core.connections import ConnectionStore
from lazytables.ui_tui.commands import Quit
from lazytables.ui_tui.grid import DataGridPanel
from lazytables.ui_tui.loop import ManualScheduler, MessageLoop
from lazytables.ui_tui.messages import KeyInput, NotificationKind, Resize
from lazytables.ui_tui.panel import PanelId
from lazytables.ui_tui.panels import QueryEditorPanel
from lazytables.ui_tui.shell import Shell, create_shell
from lazytables.ui_tui.status import StatusBarPanel


@pytest.fixture
def shell(tmp_path: Path) -> Shell:
    scheduler = ManualScheduler()
    shell = create_shell(store=ConnectionStore(tmp_path / "connections.json"), clock=scheduler.now)
    shell.resize(100, 41)
    return shell


@pytest.fixture
def loop(shell: Shell) -> MessageLoop:
    loop = MessageLoop(shell, ManualScheduler())
    loop.start()
    return loop


def press(loop: MessageLoop, *keys: str) -> None:
    for key in keys:
        loop.deliver(KeyInput.parse(key))


def _focused(shell: Shell) -> list[PanelId]:
    return [panel_id for panel_id, panel in shell.panels.items() if panel.focused]


def test_initial_focus_is_first_sidebar_panel(shell: Shell) -> None:
    assert shell.focused == PanelId.CONNECTIONS
    assert _focused(shell) == [PanelId.CONNECTIONS]
    assert PanelId.STATUS not in shell.focus_order()


def test_tab_cycles_and_wraps(shell: Shell, loop: MessageLoop) -> None:
    seen = []
    for _ in range(5):
        press(loop, "tab")
        seen.append(shell.focused)
        assert len(_focused(shell)) == 1
    assert seen == [
        PanelId.DATABASES,
        PanelId.TABLES,
        PanelId.QUERY,
        PanelId.OUTPUT,
        PanelId.CONNECTIONS,
    ]


def test_shift_tab_wraps_backwards(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "shift+tab")
    assert shell.focused == PanelId.OUTPUT
    assert _focused(shell) == [PanelId.OUTPUT]


def test_direct_focus_keys(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "o")
    assert shell.focused == PanelId.OUTPUT
    press(loop, "d")
    assert shell.focused == PanelId.DATABASES
    press(loop, "t")
    assert shell.focused == PanelId.TABLES
    press(loop, "c")
    assert shell.focused == PanelId.CONNECTIONS
    press(loop, "q")
    assert shell.focused == PanelId.QUERY


def test_status_bar_sees_focus_change_synchronously(shell: Shell) -> None:
    status = shell.panel(PanelId.STATUS)
    assert isinstance(status, StatusBarPanel)
    shell.dispatch(KeyInput("t"))
    assert status.focused_panel == "tables"


def test_query_editor_captures_printable_keys(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "q", "c", "o", "d")
    editor = shell.panel(PanelId.QUERY)
    assert isinstance(editor, QueryEditorPanel)
    assert shell.focused == PanelId.QUERY
    assert editor.buffer.text == "cod"
    press(loop, "tab")
    assert shell.focused == PanelId.OUTPUT


def test_quit_always_wins(shell: Shell, loop: MessageLoop) -> None:
    assert shell.dispatch(KeyInput.parse("ctrl+c")) == [Quit()]
    press(loop, "q")
    assert shell.dispatch(KeyInput.parse("ctrl+c")) == [Quit()]
    press(loop, "ctrl+c")
    assert loop.running is False


def test_toggle_hides_and_restores(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "D")
    assert PanelId.DATABASES not in shell.visible
    assert PanelId.DATABASES not in shell.regions
    assert shell.focused == PanelId.CONNECTIONS
    assert shell.panel(PanelId.CONNECTIONS).height == 20
    press(loop, "D")
    assert PanelId.DATABASES in shell.visible
    assert shell.panel(PanelId.CONNECTIONS).height == 13


def test_hiding_focused_panel_moves_focus_to_successor(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "t", "T")
    assert PanelId.TABLES not in shell.visible
    assert shell.focused == PanelId.QUERY
    press(loop, "tab")
    assert shell.focused == PanelId.OUTPUT
    press(loop, "O")
    assert shell.focused == PanelId.CONNECTIONS
    assert shell.panel(PanelId.QUERY).height == 40


def test_hidden_panels_are_skipped_by_tab(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "D", "T", "tab")
    assert shell.focused == PanelId.QUERY


def test_focusing_hidden_panel_shows_it(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "Q")
    assert PanelId.QUERY not in shell.visible
    press(loop, "q")
    assert PanelId.QUERY in shell.visible
    assert shell.focused == PanelId.QUERY


def test_last_panel_cannot_be_hidden(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "D", "T", "Q", "O", "C")
    assert shell.visible == {PanelId.CONNECTIONS, PanelId.STATUS}
    assert shell.focused == PanelId.CONNECTIONS
    warning = shell.notifications.active[-1]
    assert warning.kind is NotificationKind.WARNING
    assert warning.title == "Cannot hide the last panel"
    assert shell.panel(PanelId.CONNECTIONS).width == 100


def test_resize_updates_panel_sizes(shell: Shell, loop: MessageLoop) -> None:
    loop.deliver(Resize(120, 31))
    assert (shell.width, shell.height) == (120, 31)
    assert shell.panel(PanelId.CONNECTIONS).width == 24
    assert shell.panel(PanelId.STATUS).width == 120
    grid = shell.panel(PanelId.OUTPUT)
    assert isinstance(grid, DataGridPanel)
    assert (grid.state.viewport_width, grid.state.viewport_height) == (94, 22)


def test_help_toggles_and_closes_with_escape(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "?")
    assert shell.show_help
    press(loop, "?")
    assert not shell.show_help
    press(loop, "?", "escape")
    assert not shell.show_help


def test_help_overlay_renders(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "?")
    text = "\n".join(shell.render(100, 41).plain_lines())
    assert "Help" in text
    assert "Toggle help" in text


def test_open_dialog_captures_keys(shell: Shell, loop: MessageLoop) -> None:
    press(loop, "a")
    assert shell.active_modal() is not None
    press(loop, "o", "tab")
    assert shell.focused == PanelId.CONNECTIONS
    _panel, dialog = shell.active_modal()
    assert dialog.values()["Name"] == "o"
    assert dialog.active_input == 1
    press(loop, "escape")
    assert shell.active_modal() is None
    press(loop, "o")
    assert shell.focused == PanelId.OUTPUT


def test_keys_reach_focused_panel(shell: Shell, loop: MessageLoop) -> None:
    grid = shell.panel(PanelId.OUTPUT)
    assert isinstance(grid, DataGridPanel)
    grid.load_result(["a"], [[index] for index in range(20)])
    press(loop, "o", "j", "j")
    assert grid.state.selected_row == 2
    press(loop, "c", "j")
    assert grid.state.selected_row == 2


def test_render_draws_every_visible_panel(shell: Shell) -> None:
    canvas = shell.render(100, 41)
    lines = canvas.plain_lines()
    assert len(lines) == 41
    assert all(len(line) == 100 for line in lines)
    text = "\n".join(lines)
    for title in ("Connections", "Databases", "Tables", "Query", "Output"):
        assert title in text
    assert "Panel: connections" in lines[-1]
    assert "No results to display" in text


def test_duplicate_registration_is_rejected(shell: Shell) -> None:
    with pytest.raises(ValueError):
        shell.register([DataGridPanel()])


def test_shell_without_panels_is_inert() -> None:
    shell = Shell()
    assert shell.focused is None
    assert shell.dispatch(KeyInput("tab")) == []
    assert shell.dispatch(KeyInput("j")) == []
    assert shell.render(10, 3).plain_lines() == [" " * 10] * 3
