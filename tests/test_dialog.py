from __future__ import annotations

from rich.console import Console

from lazytables.ui_tui.commands import EmitMessage
from lazytables.ui_tui.dialog import DialogField, InputDialog, TextInput
from lazytables.ui_tui.messages import DialogResult, KeyInput

SHIFT_TAB = KeyInput("tab", frozenset({"shift"}))


def _dialog() -> InputDialog:
    return InputDialog("test", "Test", [DialogField("field0"), DialogField("field1"), DialogField("field2")])


def _type(dialog: InputDialog, text: str) -> None:
    for character in text:
        dialog.handle_key(KeyInput(character))


def _focused(dialog: InputDialog) -> list[int]:
    return [index for index, entry in enumerate(dialog.inputs) if entry.focused]


def test_tab_wraps_and_confirm_returns_values() -> None:
    dialog = _dialog()
    dialog.handle_key(KeyInput("tab"))
    dialog.handle_key(KeyInput("tab"))
    assert dialog.active_input == 2
    dialog.handle_key(KeyInput("tab"))
    assert dialog.active_input == 0
    assert _focused(dialog) == [0]
    _type(dialog, "abc")
    command = dialog.handle_key(KeyInput("enter"))
    assert command == EmitMessage(DialogResult("test", True, {"field0": "abc", "field1": "", "field2": ""}))
    assert dialog.resolved


def test_only_active_field_receives_edits() -> None:
    dialog = _dialog()
    dialog.handle_key(KeyInput("down"))
    _type(dialog, "xy")
    assert dialog.values() == {"field0": "", "field1": "xy", "field2": ""}
    assert _focused(dialog) == [1]


def test_shift_tab_and_arrows_cycle_backwards() -> None:
    dialog = _dialog()
    dialog.handle_key(SHIFT_TAB)
    assert dialog.active_input == 2
    dialog.handle_key(KeyInput("down"))
    assert dialog.active_input == 0
    dialog.handle_key(KeyInput("up"))
    assert dialog.active_input == 2
    assert _focused(dialog) == [2]


def test_escape_cancels_with_empty_values() -> None:
    dialog = _dialog()
    _type(dialog, "ignored")
    command = dialog.handle_key(KeyInput("escape"))
    assert command == EmitMessage(DialogResult("test", False, {}))


def test_keys_after_resolution_are_ignored() -> None:
    dialog = _dialog()
    dialog.handle_key(KeyInput("escape"))
    assert dialog.handle_key(KeyInput("enter")) is None
    assert dialog.handle_key(KeyInput("a")) is None
    assert dialog.values()["field0"] == ""


def test_secret_field_is_masked_but_returns_value() -> None:
    dialog = InputDialog("login", "Login", [DialogField("Password", secret=True)])
    _type(dialog, "hunter2")
    rendered = dialog.inputs[0].render(20).plain
    assert "hunter2" not in rendered
    assert "*******" in rendered
    command = dialog.handle_key(KeyInput("enter"))
    assert command.message.fields == {"Password": "hunter2"}


def test_required_field_blocks_confirm() -> None:
    dialog = InputDialog("conn", "Connection", [DialogField("Name", required=True), DialogField("Host")])
    dialog.handle_key(KeyInput("tab"))
    _type(dialog, "localhost")
    assert dialog.handle_key(KeyInput("enter")) is None
    assert dialog.error == "Name is required"
    assert dialog.active_input == 0
    assert not dialog.resolved
    _type(dialog, "db")
    assert dialog.error is None
    command = dialog.handle_key(KeyInput("enter"))
    assert command.message.fields == {"Name": "db", "Host": "localhost"}


def test_initial_values_are_kept() -> None:
    dialog = InputDialog("edit", "Edit", [DialogField("Host", value="db.local")])
    command = dialog.handle_key(KeyInput("enter"))
    assert command.message.fields == {"Host": "db.local"}


def test_text_input_editing() -> None:
    entry = TextInput()
    for character in "abc":
        entry.handle_key(KeyInput(character))
    entry.handle_key(KeyInput("left"))
    entry.handle_key(KeyInput("backspace"))
    assert entry.value == "ac"
    entry.handle_key(KeyInput("home"))
    entry.handle_key(KeyInput("delete"))
    assert entry.value == "c"
    entry.handle_key(KeyInput("end"))
    entry.handle_key(KeyInput("d"))
    assert entry.value == "cd"
    entry.handle_key(KeyInput("space"))
    assert entry.value == "cd "
    entry.handle_key(KeyInput("u", frozenset({"ctrl"})))
    assert entry.value == ""
    assert entry.handle_key(KeyInput("f1")) is False


def test_dialog_view_lists_every_field() -> None:
    dialog = InputDialog("conn", "Add Connection", [DialogField("Name", required=True), DialogField("Host")])
    console = Console(width=60)
    with console.capture() as capture:
        console.print(dialog.view(50))
    output = capture.get()
    assert "Add Connection" in output
    assert "Name *" in output
    assert "Host" in output
    assert dialog.height() == 8
