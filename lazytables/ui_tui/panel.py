"""Panel contract shared by every region of the screen."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, ClassVar, FrozenSet, List, Optional

from rich import box
from rich.console import RenderableType
from rich.panel import Panel as RichPanel
from rich.text import Text
from textual.binding import Binding

from lazytables.utils.logging import get_logger

from .commands import Command
from .hotkeys import find_action
from .messages import KeyInput, Message
from .styles import BORDER_BLURRED, BORDER_FOCUSED, TITLE_FOCUSED

if TYPE_CHECKING:
    from .dialog import InputDialog

logger = get_logger(__name__)


class PanelId(str, Enum):
    CONNECTIONS = "connections"
    DATABASES = "databases"
    TABLES = "tables"
    QUERY = "query"
    OUTPUT = "output"
    STATUS = "status"


SIDEBAR_PANELS = (PanelId.CONNECTIONS, PanelId.DATABASES, PanelId.TABLES)
MAIN_PANELS = (PanelId.QUERY, PanelId.OUTPUT)


class Panel:
    """Base class for a self-contained piece of UI state.

    A panel only ever changes in :meth:`update`. Key presses arrive while the
    panel holds focus; other messages arrive when their type is listed in
    :attr:`subscriptions`. Key presses are mapped through :attr:`keymap` to
    ``action_<name>`` methods, the same naming Textual uses for bindings.
    """

    panel_id: ClassVar[PanelId]
    title: ClassVar[str] = ""
    focusable: ClassVar[bool] = True
    subscriptions: ClassVar[FrozenSet[type]] = frozenset()
    keymap: ClassVar[List[Binding]] = []

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.focused = False

    @property
    def captures_input(self) -> bool:
        """Whether printable keys belong to this panel rather than the shell."""

        return False

    def modal(self) -> Optional["InputDialog"]:
        """Return the dialog this panel currently shows on top of the screen."""

        return None

    def init(self) -> Optional[Command]:
        return None

    def update(self, message: Message) -> Optional[Command]:
        if isinstance(message, KeyInput):
            return self.handle_key(message)
        return self.handle_message(message)

    def handle_key(self, key: KeyInput) -> Optional[Command]:
        action = find_action(self.keymap, key)
        if action is None:
            return None
        handler = getattr(self, f"action_{action}", None)
        if handler is None:
            logger.debug("no handler for action %s", action, extra={"panel": self.panel_id.value})
            return None
        return handler()

    def handle_message(self, message: Message) -> Optional[Command]:
        return None

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)

    def set_focused(self, focused: bool) -> None:
        self.focused = focused

    @property
    def inner_width(self) -> int:
        return max(0, self.width - 2)

    @property
    def inner_height(self) -> int:
        return max(0, self.height - 2)

    def view(self) -> RenderableType:
        raise NotImplementedError

    def frame(self, body: RenderableType, *, subtitle: Optional[str] = None) -> RenderableType:
        """Wrap ``body`` in the panel border, highlighted while focused."""

        if self.width < 2 or self.height < 2:
            return Text("")
        title = Text(f" {self.title} ", style=TITLE_FOCUSED if self.focused else "")
        return RichPanel(
            body,
            title=title,
            title_align="left",
            subtitle=subtitle,
            subtitle_align="right",
            box=box.ROUNDED,
            border_style=BORDER_FOCUSED if self.focused else BORDER_BLURRED,
            padding=(0, 0),
            width=self.width,
            height=self.height,
        )


__all__ = ["MAIN_PANELS", "Panel", "PanelId", "SIDEBAR_PANELS"]
