"""Messages flowing through the application loop.

Every external occurrence (a key press, a terminal resize, a timer firing,
an adapter call completing) and every cross-panel notification is one of the
frozen dataclasses below. Panels never call each other; they return commands
that eventually produce one of these messages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union

from lazytables.integration.database import QueryResult

MODIFIER_ORDER = ("ctrl", "alt", "shift")


class NotificationKind(str, Enum):
    INFO = "info"
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"


@dataclass(frozen=True)
class KeyInput:
    """A key press, normalised to a code plus a set of modifiers."""

    code: str
    modifiers: FrozenSet[str] = frozenset()

    @property
    def key(self) -> str:
        """Return the binding-style name, e.g. ``ctrl+e`` or ``shift+tab``."""

        prefix = [name for name in MODIFIER_ORDER if name in self.modifiers]
        return "+".join([*prefix, self.code])

    @property
    def character(self) -> Optional[str]:
        """Return the printable character this key inserts, if any."""

        if self.modifiers - {"shift"}:
            return None
        if self.code == "space":
            return " "
        if len(self.code) == 1 and self.code.isprintable():
            return self.code
        return None

    @property
    def is_chord(self) -> bool:
        return bool(self.modifiers & {"ctrl", "alt"})

    @classmethod
    def parse(cls, text: str) -> "KeyInput":
        """Build a key from a binding-style name such as ``ctrl+e``."""

        if len(text) == 1:
            return cls(text)
        *mods, code = text.split("+")
        if not code:
            # "ctrl++" names the plus key itself
            code = "+"
        return cls(code, frozenset(mod.lower() for mod in mods if mod))

    @classmethod
    def from_textual(cls, key: str, character: Optional[str] = None) -> "KeyInput":
        """Translate a Textual key event into a :class:`KeyInput`."""

        parsed = cls.parse(key)
        if character and len(character) == 1 and character.isprintable() and not parsed.is_chord:
            return cls(character)
        return parsed


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    time: datetime


@dataclass(frozen=True)
class FocusChanged:
    panel_id: str


@dataclass(frozen=True)
class ConnectionSelected:
    connection_id: str
    name: str
    kind: str


@dataclass(frozen=True)
class ConnectionDeleted:
    connection_id: str


@dataclass(frozen=True)
class DatabasesLoaded:
    connection_id: str
    databases: Tuple[str, ...]


@dataclass(frozen=True)
class DatabaseSelected:
    name: str


@dataclass(frozen=True)
class TableListLoaded:
    connection_id: str
    database: str
    tables: Tuple[str, ...]


@dataclass(frozen=True)
class TableSelected:
    name: str


@dataclass(frozen=True)
class QueryExecuted:
    query: str
    result: QueryResult


@dataclass(frozen=True)
class OperationFailed:
    """An external operation raised; rendered as an error notification."""

    operation: str
    error: str


@dataclass(frozen=True)
class NotificationRequested:
    kind: NotificationKind
    title: str
    body: str = ""


@dataclass(frozen=True)
class NotificationExpired:
    notification_id: int


@dataclass(frozen=True)
class DialogResult:
    dialog_id: str
    confirmed: bool
    fields: Dict[str, str] = field(default_factory=dict)


Message = Union[
    KeyInput,
    Resize,
    Tick,
    FocusChanged,
    ConnectionSelected,
    ConnectionDeleted,
    DatabasesLoaded,
    DatabaseSelected,
    TableListLoaded,
    TableSelected,
    QueryExecuted,
    OperationFailed,
    NotificationRequested,
    NotificationExpired,
    DialogResult,
]

__all__ = [
    "ConnectionDeleted",
    "ConnectionSelected",
    "DatabaseSelected",
    "DatabasesLoaded",
    "DialogResult",
    "FocusChanged",
    "KeyInput",
    "Message",
    "NotificationExpired",
    "NotificationKind",
    "NotificationRequested",
    "OperationFailed",
    "QueryExecuted",
    "Resize",
    "TableListLoaded",
    "TableSelected",
    "Tick",
]
