"""Screen partitioning for the shell."""
from __future__ import annotations

from typing import Collection, Dict, List, NamedTuple, Sequence

from .panel import MAIN_PANELS, SIDEBAR_PANELS, PanelId

STATUS_HEIGHT = 1


class Region(NamedTuple):
    x: int
    y: int
    width: int
    height: int


def split(total: int, weights: Sequence[int]) -> List[int]:
    """Divide ``total`` cells by ``weights``; rounding leftovers go to the last parts."""

    if not weights:
        return []
    if not any(weights):
        weights = [1] * len(weights)
    weight_sum = sum(weights)
    sizes = [total * weight // weight_sum for weight in weights]
    leftover = total - sum(sizes)
    for index in range(len(sizes) - leftover, len(sizes)):
        sizes[index] += 1
    return sizes


def compute_layout(
    width: int,
    height: int,
    visible: Collection[PanelId],
    *,
    sidebar_percent: int = 20,
    top_percent: int = 20,
) -> Dict[PanelId, Region]:
    """Return the region of every visible panel plus the status line.

    Hidden panels give their space to the visible panels of their region and
    a region with nothing visible yields its width to the other one.
    """

    width = max(0, width)
    height = max(0, height)
    regions: Dict[PanelId, Region] = {}
    status_height = min(STATUS_HEIGHT, height)
    body_height = height - status_height
    regions[PanelId.STATUS] = Region(0, body_height, width, status_height)

    sidebar = [panel for panel in SIDEBAR_PANELS if panel in visible]
    main = [panel for panel in MAIN_PANELS if panel in visible]
    if sidebar and main:
        sidebar_width = width * sidebar_percent // 100
    elif sidebar:
        sidebar_width = width
    else:
        sidebar_width = 0
    main_width = width - sidebar_width

    y = 0
    for panel, panel_height in zip(sidebar, split(body_height, [1] * len(sidebar))):
        regions[panel] = Region(0, y, sidebar_width, panel_height)
        y += panel_height

    weights = {PanelId.QUERY: top_percent, PanelId.OUTPUT: 100 - top_percent}
    y = 0
    for panel, panel_height in zip(main, split(body_height, [weights[panel] for panel in main])):
        regions[panel] = Region(sidebar_width, y, main_width, panel_height)
        y += panel_height
    return regions


__all__ = ["Region", "compute_layout", "split"]
