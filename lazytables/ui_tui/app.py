"""Textual application hosting the LazyTables shell."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from rich.console import RenderableType
from textual import events
from textual.app import App, ComposeResult
from textual.widget import Widget

from lazytables.core.config import LazyTablesSettings
from lazytables.core.connections import ConnectionStore
from lazytables.integration.database import DatabaseAdapter
from lazytables.utils.logging import get_logger

from .loop import MessageLoop, Operation, OperationCallback
from .messages import KeyInput, Message, Resize
from .shell import Shell, create_shell

logger = get_logger(__name__)


class TextualScheduler:
    """Resolve timers and operations on the running Textual event loop."""

    def __init__(self, app: App[None]) -> None:
        self._app = app

    def now(self) -> datetime:
        return datetime.now()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self._app.set_timer(delay, callback)

    def spawn(self, operation: Operation, callback: OperationCallback, description: str) -> None:
        async def run() -> None:
            callback(await operation())

        self._app.run_worker(run(), name=description, group="operations", exit_on_error=False)


class ShellView(Widget, can_focus=True):
    """Full-screen widget that paints the shell and forwards raw input."""

    DEFAULT_CSS = """
    ShellView {
        width: 100%;
        height: 100%;
    }
    """

    def __init__(self, shell: Shell, on_input: Callable[[Message], None]) -> None:
        super().__init__(id="shell-view")
        self.shell = shell
        self._on_input = on_input

    def render(self) -> RenderableType:
        return self.shell.render(self.size.width, self.size.height)

    def on_key(self, event: events.Key) -> None:
        # keep Textual's own bindings (tab focus and friends) out of the way
        event.stop()
        event.prevent_default()
        self._on_input(KeyInput.from_textual(event.key, event.character))

    def on_resize(self, event: events.Resize) -> None:
        self._on_input(Resize(event.size.width, event.size.height))


class LazyTablesTUI(App[None]):
    """Interactive Textual application for browsing databases."""

    TITLE = "LazyTables"

    def __init__(
        self,
        settings: Optional[LazyTablesSettings] = None,
        *,
        adapter: Optional[DatabaseAdapter] = None,
        store: Optional[ConnectionStore] = None,
    ) -> None:
        super().__init__()
        self.app_settings = settings or LazyTablesSettings()
        self.shell = create_shell(self.app_settings, adapter=adapter, store=store)
        self.scheduler = TextualScheduler(self)
        self.message_loop = MessageLoop(
            self.shell, self.scheduler, on_quit=self.exit, on_change=self._refresh_view
        )
        self.shell_view = ShellView(self.shell, self.message_loop.deliver)

    def compose(self) -> ComposeResult:
        yield self.shell_view

    def on_mount(self) -> None:
        self.shell_view.focus()
        self.message_loop.start()
        logger.info("tui started")

    def _refresh_view(self) -> None:
        if self.shell_view.is_mounted:
            self.shell_view.refresh()

    async def on_unmount(self) -> None:
        logger.info("tui stopped")


async def launch_tui(
    settings: Optional[LazyTablesSettings] = None,
    *,
    adapter: Optional[DatabaseAdapter] = None,
    store: Optional[ConnectionStore] = None,
) -> None:
    """Launch the TUI using Textual's asynchronous API."""

    app = LazyTablesTUI(settings, adapter=adapter, store=store)
    await app.run_async()


__all__ = ["LazyTablesTUI", "ShellView", "TextualScheduler", "launch_tui"]
