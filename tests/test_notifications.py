from __future__ import annotations

from datetime import datetime

from lazytables.ui_tui.commands import EmitMessage, ScheduleExpiry
from lazytables.ui_tui.loop import ManualScheduler, MessageLoop
from lazytables.ui_tui.messages import NotificationExpired, NotificationKind, NotificationRequested
from lazytables.ui_tui.notifications import NotificationManager
from lazytables.ui_tui.shell import Shell


def _loop() -> tuple[Shell, ManualScheduler, MessageLoop]:
    scheduler = ManualScheduler()
    shell = Shell(clock=scheduler.now)
    loop = MessageLoop(shell, scheduler)
    loop.start()
    return shell, scheduler, loop


def test_notifications_expire_after_duration() -> None:
    shell, scheduler, loop = _loop()
    loop.deliver(NotificationRequested(NotificationKind.INFO, "A"))
    loop.deliver(NotificationRequested(NotificationKind.ERROR, "B", "boom"))
    assert [item.id for item in shell.notifications.active] == [1, 2]
    scheduler.advance(2.9)
    assert len(shell.notifications.active) == 2
    scheduler.advance(0.1)
    assert shell.notifications.active == []
    assert scheduler.pending_timers == 0


def test_staggered_notifications_expire_independently() -> None:
    shell, scheduler, loop = _loop()
    loop.deliver(NotificationRequested(NotificationKind.INFO, "first"))
    scheduler.advance(1.0)
    loop.deliver(NotificationRequested(NotificationKind.INFO, "second"))
    scheduler.advance(2.0)
    assert [item.title for item in shell.notifications.active] == ["second"]
    scheduler.advance(1.0)
    assert shell.notifications.active == []


def test_expiry_is_idempotent() -> None:
    manager = NotificationManager(duration=3.0)
    manager.add(NotificationKind.INFO, "one")
    manager.add(NotificationKind.INFO, "two")
    assert manager.expire(1) is True
    assert manager.expire(1) is False
    assert manager.update(NotificationExpired(1)) is None
    assert [item.title for item in manager.active] == ["two"]


def test_add_schedules_expiry_with_increasing_ids() -> None:
    moment = datetime(2024, 5, 1, 9, 30)
    manager = NotificationManager(duration=5.0, clock=lambda: moment)
    assert manager.add(NotificationKind.SUCCESS, "saved") == ScheduleExpiry(1, 5.0)
    assert manager.update(NotificationRequested(NotificationKind.WARNING, "careful")) == ScheduleExpiry(2, 5.0)
    first = manager.active[0]
    assert first.created_at == moment
    assert (first.expires_at - first.created_at).total_seconds() == 5.0


def test_request_emits_a_message_without_storing() -> None:
    manager = NotificationManager()
    command = manager.request(NotificationKind.ERROR, "Failed", "details")
    assert command == EmitMessage(NotificationRequested(NotificationKind.ERROR, "Failed", "details"))
    assert manager.active == []
    unbound = NotificationManager.request(NotificationKind.INFO, "x")
    assert unbound == EmitMessage(NotificationRequested(NotificationKind.INFO, "x"))


def test_card_width() -> None:
    assert NotificationManager.card_width(80) == 24
    assert NotificationManager.card_width(200) == 50
    assert NotificationManager.card_width(10) == 10


def test_cards_render_in_top_right_corner() -> None:
    shell, _scheduler, loop = _loop()
    loop.deliver(NotificationRequested(NotificationKind.SUCCESS, "Saved", "all good"))
    lines = shell.render(80, 24).plain_lines()
    assert all(len(line) == 80 for line in lines)
    assert lines[0].rstrip().endswith("╮")
    assert lines[0][80 - 24] == "╭"
    assert "SUCCESS: Saved" in lines[1]
    assert lines[1].index("SUCCESS") > 80 - 24
    assert "all good" in lines[2]
