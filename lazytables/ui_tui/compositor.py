"""Paint panel renderables and overlays onto one fixed-size screen."""
from __future__ import annotations

import io
from typing import Iterable, List, Optional

from rich.console import Console, ConsoleOptions, RenderableType, RenderResult
from rich.segment import Segment
from textual.strip import Strip


def make_console(width: int, height: int) -> Console:
    """Return an off-screen console used only to lay out renderables."""

    return Console(
        width=max(1, width),
        height=max(1, height),
        file=io.StringIO(),
        force_terminal=True,
        color_system="truecolor",
        legacy_windows=False,
    )


class Canvas:
    """A grid of ``height`` strips, each exactly ``width`` cells wide."""

    def __init__(self, width: int, height: int, console: Optional[Console] = None) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.console = console or make_console(self.width, self.height)
        self.lines: List[Strip] = [Strip.blank(self.width) for _ in range(self.height)]

    def render(self, renderable: RenderableType, width: int, height: Optional[int] = None) -> List[Strip]:
        """Lay out ``renderable`` at ``width`` (and ``height`` when given)."""

        if width <= 0 or height == 0:
            return []
        options = self.console.options.update_width(width)
        if height is not None:
            options = options.update_dimensions(width, height)
        lines = self.console.render_lines(renderable, options, pad=True)
        return [Strip(line, width).crop_extend(0, width, None) for line in lines]

    def paste(self, strips: Iterable[Strip], x: int, y: int) -> None:
        """Overwrite the canvas with ``strips`` starting at column ``x``, row ``y``."""

        if x >= self.width:
            return
        for row, strip in enumerate(strips, start=y):
            if row < 0 or row >= self.height:
                continue
            overlay = strip.crop(0, self.width - x)
            base = self.lines[row]
            right = base.crop(x + overlay.cell_length, self.width)
            self.lines[row] = Strip.join([base.crop(0, x), overlay, right])

    def draw(self, renderable: RenderableType, x: int, y: int, width: int, height: Optional[int] = None) -> int:
        """Render and paste in one step; return the number of rows drawn."""

        strips = self.render(renderable, width, height)
        self.paste(strips, x, y)
        return len(strips)

    def plain_lines(self) -> List[str]:
        return [strip.text for strip in self.lines]

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        new_line = Segment.line()
        for strip in self.lines:
            yield from strip
            yield new_line


__all__ = ["Canvas", "make_console"]
