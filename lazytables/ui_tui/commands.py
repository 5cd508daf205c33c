"""Deferred effects returned by panel update steps.

A command never runs anything itself. The message loop resolves it through a
scheduler and the outcome re-enters the loop as an ordinary message on a
later tick. ``None`` stands for "no effect" everywhere a command is accepted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Iterator, List, Optional, Union

from .messages import Message


@dataclass(frozen=True)
class ScheduleExpiry:
    """Emit ``NotificationExpired(notification_id)`` after ``duration`` seconds."""

    notification_id: int
    duration: float


@dataclass(frozen=True)
class ScheduleTick:
    """Emit ``Tick`` carrying the scheduler's clock after ``duration`` seconds."""

    duration: float = 1.0


@dataclass(frozen=True)
class EmitMessage:
    message: Message


@dataclass(frozen=True)
class Perform:
    """Await an external operation and emit the message it returns, if any."""

    operation: Callable[[], Awaitable[Optional[Message]]]
    description: str = "operation"


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Batch:
    commands: List["Command"] = field(default_factory=list)


Command = Union[ScheduleExpiry, ScheduleTick, EmitMessage, Perform, Quit, Batch]


def batch(*commands: Optional[Command]) -> Optional[Command]:
    """Combine commands, dropping ``None`` and collapsing trivial batches."""

    flat = list(flatten(commands))
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return Batch(flat)


def flatten(commands: Iterable[Optional[Command]]) -> Iterator[Command]:
    """Yield the leaf commands of possibly nested batches, in order."""

    for command in commands:
        if command is None:
            continue
        if isinstance(command, Batch):
            yield from flatten(command.commands)
        else:
            yield command


def emit(message: Message) -> EmitMessage:
    return EmitMessage(message)


__all__ = [
    "Batch",
    "Command",
    "EmitMessage",
    "Perform",
    "Quit",
    "ScheduleExpiry",
    "ScheduleTick",
    "batch",
    "emit",
    "flatten",
]
