"""Modal multi-field input dialog.

The dialog is a small state machine: while active, exactly one field holds
focus and receives edits; ``enter`` or ``escape`` resolve it. The outcome is
delivered once, as a :class:`DialogResult` message, and the owner closes the
dialog when that message comes back through the loop.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel as RichPanel
from rich.text import Text

from lazytables.utils.logging import get_logger

from .commands import Command, emit
from .hotkeys import DIALOG_KEYS, find_action
from .messages import DialogResult, KeyInput
from .styles import (
    DIALOG_BORDER,
    DIALOG_CURSOR,
    DIALOG_ERROR,
    DIALOG_HINT,
    DIALOG_INPUT,
    DIALOG_LABEL,
    DIALOG_LABEL_ACTIVE,
    PLACEHOLDER,
)

logger = get_logger(__name__)

MASK_CHARACTER = "*"
DIALOG_MAX_WIDTH = 60
HINT = "tab/↓ next · shift+tab/↑ previous · enter confirm · esc cancel"


class TextInput:
    """Single-line editable buffer with a cursor."""

    def __init__(self, *, value: str = "", placeholder: str = "", secret: bool = False) -> None:
        self.value = value
        self.placeholder = placeholder
        self.secret = secret
        self.cursor = len(value)
        self.focused = False

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def insert(self, text: str) -> None:
        self.value = self.value[: self.cursor] + text + self.value[self.cursor :]
        self.cursor += len(text)

    def backspace(self) -> None:
        if self.cursor == 0:
            return
        self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
        self.cursor -= 1

    def delete(self) -> None:
        self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]

    def move_cursor(self, delta: int) -> None:
        self.cursor = min(max(self.cursor + delta, 0), len(self.value))

    def clear_before_cursor(self) -> None:
        self.value = self.value[self.cursor :]
        self.cursor = 0

    def handle_key(self, key: KeyInput) -> bool:
        """Apply an editing key; return ``False`` when the key is not an edit."""

        name = key.key
        if name == "backspace" or name == "ctrl+h":
            self.backspace()
        elif name == "delete":
            self.delete()
        elif name == "left":
            self.move_cursor(-1)
        elif name == "right":
            self.move_cursor(1)
        elif name in {"home", "ctrl+a"}:
            self.cursor = 0
        elif name in {"end", "ctrl+e"}:
            self.cursor = len(self.value)
        elif name == "ctrl+u":
            self.clear_before_cursor()
        elif key.character is not None:
            self.insert(key.character)
        else:
            return False
        return True

    @property
    def display_value(self) -> str:
        return MASK_CHARACTER * len(self.value) if self.secret else self.value

    def render(self, width: int) -> Text:
        text = Text(no_wrap=True, overflow="crop", end="")
        if width <= 0:
            return text
        if not self.value and not self.focused:
            text.append(self.placeholder[:width], style=PLACEHOLDER)
            return text
        shown = self.display_value
        start = max(0, self.cursor - (width - 1))
        window = shown[start : start + width]
        if not self.focused:
            text.append(window, style=DIALOG_INPUT)
            return text
        cursor = self.cursor - start
        text.append(window[:cursor], style=DIALOG_INPUT)
        text.append(window[cursor : cursor + 1] or " ", style=DIALOG_CURSOR)
        text.append(window[cursor + 1 :], style=DIALOG_INPUT)
        if not self.value and self.placeholder:
            text.append(self.placeholder[: max(0, width - 1)], style=PLACEHOLDER)
        return text


@dataclass
class DialogField:
    label: str
    placeholder: str = ""
    secret: bool = False
    value: str = ""
    required: bool = False


class InputDialog:
    """Centered form collecting one value per :class:`DialogField`."""

    def __init__(self, dialog_id: str, title: str, fields: Sequence[DialogField]) -> None:
        if not fields:
            raise ValueError("A dialog needs at least one field")
        self.dialog_id = dialog_id
        self.title = title
        self.fields: List[DialogField] = list(fields)
        self.inputs = [
            TextInput(value=item.value, placeholder=item.placeholder, secret=item.secret)
            for item in self.fields
        ]
        self.active_input = 0
        self.error: Optional[str] = None
        self.resolved = False
        self.inputs[0].focus()

    def values(self) -> Dict[str, str]:
        return {item.label: entry.value for item, entry in zip(self.fields, self.inputs)}

    def focus_field(self, index: int) -> None:
        self.inputs[self.active_input].blur()
        self.active_input = index % len(self.inputs)
        self.inputs[self.active_input].focus()

    def next_field(self) -> None:
        self.focus_field(self.active_input + 1)

    def previous_field(self) -> None:
        self.focus_field(self.active_input - 1)

    def missing_fields(self) -> List[int]:
        return [
            index
            for index, (item, entry) in enumerate(zip(self.fields, self.inputs))
            if item.required and not entry.value.strip()
        ]

    def confirm(self) -> Optional[Command]:
        missing = self.missing_fields()
        if missing:
            self.error = f"{self.fields[missing[0]].label} is required"
            self.focus_field(missing[0])
            return None
        self.resolved = True
        logger.debug("dialog %s confirmed", self.dialog_id)
        return emit(DialogResult(self.dialog_id, True, self.values()))

    def cancel(self) -> Optional[Command]:
        self.resolved = True
        logger.debug("dialog %s cancelled", self.dialog_id)
        return emit(DialogResult(self.dialog_id, False, {}))

    def handle_key(self, key: KeyInput) -> Optional[Command]:
        if self.resolved:
            return None
        action = find_action(DIALOG_KEYS, key)
        if action == "next_field":
            self.next_field()
        elif action == "previous_field":
            self.previous_field()
        elif action == "confirm":
            return self.confirm()
        elif action == "cancel":
            return self.cancel()
        elif self.inputs[self.active_input].handle_key(key):
            self.error = None
        return None

    def width_for(self, screen_width: int) -> int:
        return max(0, min(DIALOG_MAX_WIDTH, screen_width - 4))

    def height(self) -> int:
        # label + input per field, blank + hint, optional error, border
        return len(self.fields) * 2 + 2 + (1 if self.error else 0) + 2

    def view(self, width: int) -> RenderableType:
        inner = max(0, width - 4)
        lines: List[RenderableType] = []
        for index, (item, entry) in enumerate(zip(self.fields, self.inputs)):
            active = index == self.active_input
            label = Text(item.label + (" *" if item.required else ""))
            label.stylize(DIALOG_LABEL_ACTIVE if active else DIALOG_LABEL)
            lines.append(label)
            row = Text("> " if active else "  ", style=DIALOG_LABEL_ACTIVE)
            row.append_text(entry.render(max(0, inner - 2)))
            lines.append(row)
        if self.error:
            lines.append(Text(self.error, style=DIALOG_ERROR))
        lines.append(Text(""))
        lines.append(Text(HINT, style=DIALOG_HINT, no_wrap=True, overflow="ellipsis"))
        return RichPanel(
            Group(*lines),
            title=self.title,
            box=box.ROUNDED,
            border_style=DIALOG_BORDER,
            padding=(0, 1),
            width=width,
        )


__all__ = ["DialogField", "InputDialog", "TextInput"]
