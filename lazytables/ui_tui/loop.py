"""Single ordered message queue and command resolution.

The loop is the only place where commands turn into effects. Timers and
external operations are handed to a scheduler, and whatever they produce is
posted back into the same queue, so every state change happens inside
:meth:`Shell.dispatch` in arrival order.
"""
from __future__ import annotations

import heapq
import itertools
from collections import deque
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Deque, Iterable, List, Optional, Protocol, Tuple

from lazytables.utils.errors import LazyTablesError
from lazytables.utils.logging import get_logger

from .commands import Command, EmitMessage, Perform, Quit, ScheduleExpiry, ScheduleTick, flatten
from .messages import Message, NotificationExpired, OperationFailed, Tick
from .shell import Shell

logger = get_logger(__name__)

Operation = Callable[[], Awaitable[Optional[Message]]]
OperationCallback = Callable[[Optional[Message]], None]


class Scheduler(Protocol):
    def now(self) -> datetime:
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        ...

    def spawn(self, operation: Operation, callback: OperationCallback, description: str) -> None:
        ...


class ManualScheduler:
    """Virtual-clock scheduler; time only moves when :meth:`advance` is called."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.start = start or datetime(2024, 1, 1, 12, 0, 0)
        self.elapsed = 0.0
        self._timers: List[Tuple[float, int, Callable[[], None]]] = []
        self._sequence = itertools.count()
        self._operations: List[Tuple[Operation, OperationCallback, str]] = []

    def now(self) -> datetime:
        return self.start + timedelta(seconds=self.elapsed)

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._timers, (self.elapsed + max(0.0, delay), next(self._sequence), callback))

    def spawn(self, operation: Operation, callback: OperationCallback, description: str = "operation") -> None:
        self._operations.append((operation, callback, description))

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    @property
    def pending_operations(self) -> int:
        return len(self._operations)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in deadline order."""

        target = self.elapsed + seconds
        while self._timers and self._timers[0][0] <= target:
            due, _, callback = heapq.heappop(self._timers)
            self.elapsed = due
            callback()
        self.elapsed = target

    async def run_operations(self) -> int:
        """Await every spawned operation, including ones spawned meanwhile."""

        completed = 0
        while self._operations:
            operations, self._operations = self._operations, []
            for operation, callback, _description in operations:
                callback(await operation())
                completed += 1
        return completed


class MessageLoop:
    def __init__(
        self,
        shell: Shell,
        scheduler: Scheduler,
        *,
        on_quit: Optional[Callable[[], None]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self.shell = shell
        self.scheduler = scheduler
        self.on_quit = on_quit
        self.on_change = on_change
        self.queue: Deque[Message] = deque()
        self.running = True
        self._processing = False

    def start(self) -> None:
        self.resolve(self.shell.start())
        self.process()

    def post(self, message: Message) -> None:
        self.queue.append(message)

    def deliver(self, message: Optional[Message]) -> None:
        """Post ``message`` (if any) and drain the queue."""

        if message is not None:
            self.post(message)
        self.process()

    def process(self) -> bool:
        """Dispatch queued messages until the queue is empty."""

        if self._processing:
            return self.running
        self._processing = True
        try:
            while self.queue and self.running:
                message = self.queue.popleft()
                self.resolve(self.shell.dispatch(message))
        finally:
            self._processing = False
        if self.on_change is not None:
            self.on_change()
        return self.running

    def resolve(self, commands: Iterable[Optional[Command]]) -> None:
        for command in flatten(commands):
            if isinstance(command, ScheduleExpiry):
                self._schedule(command.duration, NotificationExpired(command.notification_id))
            elif isinstance(command, ScheduleTick):
                self.scheduler.call_later(command.duration, self._tick)
            elif isinstance(command, EmitMessage):
                self.post(command.message)
            elif isinstance(command, Perform):
                self.scheduler.spawn(self._guard(command), self.deliver, command.description)
            elif isinstance(command, Quit):
                self.quit()

    def _schedule(self, delay: float, message: Message) -> None:
        self.scheduler.call_later(delay, lambda: self.deliver(message))

    def _tick(self) -> None:
        self.deliver(Tick(self.scheduler.now()))

    def _guard(self, command: Perform) -> Operation:
        async def run() -> Optional[Message]:
            try:
                return await command.operation()
            except LazyTablesError as exc:
                logger.warning("%s failed: %s", command.description, exc)
                return OperationFailed(command.description, str(exc))
            except Exception as exc:
                # driver errors (OSError and friends) still have to reach the queue
                logger.exception("%s raised unexpectedly", command.description)
                return OperationFailed(command.description, str(exc) or type(exc).__name__)

        return run

    def quit(self) -> None:
        if not self.running:
            return
        self.running = False
        logger.info("quit requested")
        if self.on_quit is not None:
            self.on_quit()


__all__ = ["ManualScheduler", "MessageLoop", "Scheduler"]
