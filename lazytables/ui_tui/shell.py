"""Application shell: panel registry, focus routing and screen composition."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from lazytables.core.config import LazyTablesSettings
from lazytables.core.connections import ConnectionStore
from lazytables.integration.database import DatabaseAdapter, MockDatabaseAdapter
from lazytables.utils.logging import get_logger
from lazytables.utils.profiling import profile

from .commands import Command, Quit
from .compositor import Canvas
from .dialog import InputDialog
from .grid import DataGridPanel
from .help import help_renderable
from .hotkeys import find_action, global_bindings
from .layout import Region, compute_layout
from .messages import (
    FocusChanged,
    KeyInput,
    Message,
    NotificationExpired,
    NotificationKind,
    NotificationRequested,
    OperationFailed,
    Resize,
)
from .notifications import NotificationManager
from .panel import Panel, PanelId
from .panels import ConnectionListPanel, DatabaseListPanel, QueryEditorPanel, TableListPanel
from .status import StatusBarPanel

logger = get_logger(__name__)

FOCUS_CYCLE_ACTIONS = frozenset({"focus_next", "focus_previous"})
HELP_MAX_WIDTH = 72
SLOW_RENDER_SECONDS = 0.05


class Shell:
    """Single owner of the panel registry, focus, visibility and notifications.

    Key presses go to the focused panel unless they match a global binding;
    every other message is broadcast to the panels subscribed to its type, in
    registration order. Panels never see each other, only messages.
    """

    def __init__(
        self,
        settings: Optional[LazyTablesSettings] = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings or LazyTablesSettings()
        self.panels: Dict[PanelId, Panel] = {}
        self.order: List[PanelId] = []
        self.visible: Set[PanelId] = set()
        self.focused: Optional[PanelId] = None
        self.bindings = global_bindings(self.settings.keybindings)
        self.notifications = NotificationManager(
            duration=self.settings.ui.notification_duration, clock=clock
        )
        self.show_help = False
        self.width = 0
        self.height = 0
        self.regions: Dict[PanelId, Region] = {}

    def register(self, panels: Iterable[Panel]) -> None:
        for panel in panels:
            if panel.panel_id in self.panels:
                raise ValueError(f"Panel {panel.panel_id.value} is already registered")
            self.panels[panel.panel_id] = panel
            self.order.append(panel.panel_id)
            self.visible.add(panel.panel_id)
        if self.focused is None:
            candidates = self.focus_order()
            if candidates:
                self.focused = candidates[0]
                self.panels[self.focused].set_focused(True)
        self._relayout()

    def panel(self, panel_id: PanelId) -> Panel:
        return self.panels[panel_id]

    def start(self) -> List[Command]:
        """Run every panel's ``init`` and announce the initial focus."""

        commands = [panel.init() for panel in self._ordered()]
        if self.focused is not None:
            commands.extend(self.broadcast(FocusChanged(self.focused.value)))
        return [command for command in commands if command is not None]

    def _ordered(self) -> List[Panel]:
        return [self.panels[panel_id] for panel_id in self.order]

    def focus_order(self) -> List[PanelId]:
        return [
            panel_id
            for panel_id in self.order
            if self.panels[panel_id].focusable and panel_id in self.visible
        ]

    def dispatch(self, message: Message) -> List[Command]:
        with profile(f"dispatch:{type(message).__name__}"):
            if isinstance(message, KeyInput):
                return self.handle_key(message)
            if isinstance(message, Resize):
                self.resize(message.width, message.height)
                return []
            commands: List[Optional[Command]] = []
            if isinstance(message, (NotificationRequested, NotificationExpired)):
                commands.append(self.notifications.update(message))
            elif isinstance(message, OperationFailed):
                logger.warning("%s failed: %s", message.operation, message.error)
                commands.append(
                    self.notifications.add(
                        NotificationKind.ERROR, f"{message.operation.capitalize()} failed", message.error
                    )
                )
            commands.extend(self.broadcast(message))
            return [command for command in commands if command is not None]

    def broadcast(self, message: Message) -> List[Command]:
        commands: List[Command] = []
        for panel in self._ordered():
            if type(message) in panel.subscriptions:
                command = panel.update(message)
                if command is not None:
                    commands.append(command)
        return commands

    def active_modal(self) -> Optional[Tuple[Panel, InputDialog]]:
        for panel in self._ordered():
            dialog = panel.modal()
            if dialog is not None:
                return panel, dialog
        return None

    def handle_key(self, key: KeyInput) -> List[Command]:
        action = find_action(self.bindings, key)
        if action == "quit":
            return [Quit()]
        modal = self.active_modal()
        if modal is not None:
            return self._deliver(modal[0], key)
        if self.show_help and (action == "help" or key.key == "escape"):
            self.show_help = False
            return []
        panel = self.panels.get(self.focused) if self.focused else None
        if panel is not None and panel.captures_input and not key.is_chord:
            if action not in FOCUS_CYCLE_ACTIONS:
                return self._deliver(panel, key)
        if action is not None:
            return self.run_action(action)
        if panel is None:
            return []
        return self._deliver(panel, key)

    def _deliver(self, panel: Panel, key: KeyInput) -> List[Command]:
        command = panel.update(key)
        return [command] if command is not None else []

    def run_action(self, action: str) -> List[Command]:
        if action == "quit":
            return [Quit()]
        if action == "help":
            self.show_help = not self.show_help
            return []
        if action == "focus_next":
            return self.focus_next()
        if action == "focus_previous":
            return self.focus_previous()
        verb, _, target = action.partition("_")
        if verb == "focus":
            return self.set_focus(PanelId(target))
        if verb == "toggle":
            return self.toggle_visibility(PanelId(target))
        logger.debug("unknown action %s", action)
        return []

    def set_focus(self, panel_id: PanelId) -> List[Command]:
        panel = self.panels.get(panel_id)
        if panel is None or not panel.focusable:
            return []
        if panel_id not in self.visible:
            self.visible.add(panel_id)
            self._relayout()
        if self.focused == panel_id:
            return []
        if self.focused is not None:
            self.panels[self.focused].set_focused(False)
        self.focused = panel_id
        panel.set_focused(True)
        logger.debug("focus moved", extra={"panel": panel_id.value})
        return self.broadcast(FocusChanged(panel_id.value))

    def _step_focus(self, step: int) -> List[Command]:
        candidates = self.focus_order()
        if not candidates:
            return []
        if self.focused not in candidates:
            return self.set_focus(candidates[0])
        index = candidates.index(self.focused)
        return self.set_focus(candidates[(index + step) % len(candidates)])

    def focus_next(self) -> List[Command]:
        return self._step_focus(1)

    def focus_previous(self) -> List[Command]:
        return self._step_focus(-1)

    def toggle_visibility(self, panel_id: PanelId) -> List[Command]:
        panel = self.panels.get(panel_id)
        if panel is None:
            return []
        if panel_id not in self.visible:
            self.visible.add(panel_id)
            self._relayout()
            return []
        remaining = [candidate for candidate in self.focus_order() if candidate != panel_id]
        if panel.focusable and not remaining:
            return [self.notifications.add(NotificationKind.WARNING, "Cannot hide the last panel")]
        commands: List[Command] = []
        if self.focused == panel_id:
            # hand focus to the next panel in cycle order
            cycle = self.focus_order()
            index = cycle.index(panel_id)
            successor = next(
                candidate for candidate in cycle[index + 1 :] + cycle[:index] if candidate != panel_id
            )
            commands = self.set_focus(successor)
        self.visible.discard(panel_id)
        self._relayout()
        return commands

    def resize(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._relayout()

    def _relayout(self) -> None:
        self.regions = compute_layout(
            self.width,
            self.height,
            self.visible,
            sidebar_percent=self.settings.ui.left_sidebar_width,
            top_percent=self.settings.ui.top_panel_height,
        )
        for panel_id, region in self.regions.items():
            panel = self.panels.get(panel_id)
            if panel is not None and panel_id in self.visible:
                panel.set_size(region.width, region.height)

    def render(self, width: int, height: int) -> Canvas:
        """Compose every visible panel and the overlays into one screen."""

        if (width, height) != (self.width, self.height):
            self.resize(width, height)
        with profile("render", slow_after=SLOW_RENDER_SECONDS):
            canvas = Canvas(self.width, self.height)
            for panel in self._ordered():
                region = self.regions.get(panel.panel_id)
                if region is None or panel.panel_id not in self.visible:
                    continue
                canvas.draw(panel.view(), region.x, region.y, region.width, region.height)
            self._draw_overlays(canvas)
        return canvas

    def _draw_overlays(self, canvas: Canvas) -> None:
        width, height = canvas.width, canvas.height
        modal = self.active_modal()
        if modal is not None:
            dialog = modal[1]
            dialog_width = dialog.width_for(width)
            dialog_height = min(dialog.height(), height)
            canvas.draw(
                dialog.view(dialog_width),
                (width - dialog_width) // 2,
                (height - dialog_height) // 2,
                dialog_width,
                dialog_height,
            )
        elif self.show_help:
            help_width = max(0, min(HELP_MAX_WIDTH, width - 4))
            strips = canvas.render(
                help_renderable(self.bindings, close_key=self.settings.keybindings.help), help_width
            )
            strips = strips[: max(0, height - 2)]
            canvas.paste(strips, (width - help_width) // 2, (height - len(strips)) // 2)
        card_width = self.notifications.card_width(width)
        y = 0
        for card in self.notifications.cards(width):
            strips = canvas.render(card, card_width)
            canvas.paste(strips, width - card_width, y)
            y += len(strips)


def create_shell(
    settings: Optional[LazyTablesSettings] = None,
    *,
    adapter: Optional[DatabaseAdapter] = None,
    store: Optional[ConnectionStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> Shell:
    """Build a shell with the standard LazyTables panels registered."""

    settings = settings or LazyTablesSettings()
    adapter = adapter or MockDatabaseAdapter()
    store = store or ConnectionStore(settings.app.connections_path)
    shell = Shell(settings, clock=clock)
    shell.register(
        [
            ConnectionListPanel(store),
            DatabaseListPanel(adapter, store, timeout=settings.app.connection_timeout),
            TableListPanel(adapter, store, timeout=settings.app.query_timeout),
            QueryEditorPanel(
                adapter,
                store,
                history_limit=settings.app.query_history_limit,
                timeout=settings.app.query_timeout,
            ),
            DataGridPanel(cell_width=settings.ui.cell_width),
            StatusBarPanel(clock=clock),
        ]
    )
    return shell


__all__ = ["Shell", "create_shell"]
