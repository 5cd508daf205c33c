"""Timed toast notifications."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel as RichPanel
from rich.text import Text

from lazytables.utils.logging import get_logger

from .commands import Command, ScheduleExpiry, emit
from .messages import Message, NotificationExpired, NotificationKind, NotificationRequested
from .styles import NOTIFICATION_BORDERS, NOTIFICATION_ICONS

logger = get_logger(__name__)

MIN_CARD_WIDTH = 24


@dataclass(frozen=True)
class Notification:
    id: int
    kind: NotificationKind
    title: str
    body: str
    created_at: datetime
    expires_at: datetime


class NotificationManager:
    """Owns the set of visible notifications.

    Each accepted request gets the next id (starting at 1) and schedules its
    own expiry. Expiry is keyed by id, so a timer that fires for a
    notification already gone does nothing.
    """

    def __init__(self, *, duration: float = 3.0, clock: Callable[[], datetime] = datetime.now) -> None:
        self.duration = duration
        self.clock = clock
        self.next_id = 1
        self.active: List[Notification] = []

    @staticmethod
    def request(kind: NotificationKind, title: str, body: str = "") -> Command:
        """Command asking the shell to show a notification.

        Static so panels can ask without holding the manager; the request
        travels through the message queue and is numbered by :meth:`update`.
        """

        return emit(NotificationRequested(kind, title, body))

    def update(self, message: Message) -> Optional[Command]:
        if isinstance(message, NotificationRequested):
            return self.add(message.kind, message.title, message.body)
        if isinstance(message, NotificationExpired):
            self.expire(message.notification_id)
        return None

    def add(self, kind: NotificationKind, title: str, body: str = "") -> Command:
        now = self.clock()
        notification = Notification(
            id=self.next_id,
            kind=kind,
            title=title,
            body=body,
            created_at=now,
            expires_at=now + timedelta(seconds=self.duration),
        )
        self.next_id += 1
        self.active.append(notification)
        logger.info("%s: %s %s", kind.value, title, body)
        return ScheduleExpiry(notification.id, self.duration)

    def expire(self, notification_id: int) -> bool:
        for index, notification in enumerate(self.active):
            if notification.id == notification_id:
                del self.active[index]
                return True
        return False

    @staticmethod
    def card_width(screen_width: int) -> int:
        return min(screen_width, max(MIN_CARD_WIDTH, screen_width // 4))

    def cards(self, screen_width: int) -> List[RenderableType]:
        """Return one bordered card per active notification, oldest first."""

        width = self.card_width(screen_width)
        if width < 4:
            return []
        cards: List[RenderableType] = []
        for notification in self.active:
            heading = Text(f"{NOTIFICATION_ICONS[notification.kind]} ", style="bold")
            heading.append(f"{notification.kind.name}: {notification.title}", style="bold")
            parts: List[RenderableType] = [heading]
            if notification.body:
                parts.append(Text(notification.body))
            cards.append(
                RichPanel(
                    Group(*parts),
                    box=box.ROUNDED,
                    border_style=NOTIFICATION_BORDERS[notification.kind],
                    padding=(0, 1),
                    width=width,
                )
            )
        return cards


__all__ = ["Notification", "NotificationManager"]
