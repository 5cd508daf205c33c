"""Terminal user interface package for LazyTables."""

from __future__ import annotations

from .app import LazyTablesTUI, launch_tui
from .loop import ManualScheduler, MessageLoop
from .panel import Panel, PanelId
from .shell import Shell, create_shell

__all__ = [
    "LazyTablesTUI",
    "ManualScheduler",
    "MessageLoop",
    "Panel",
    "PanelId",
    "Shell",
    "create_shell",
    "launch_tui",
]
