from __future__ import annotations

import pytest

from lazytables.ui_tui.layout import Region, compute_layout, split
from lazytables.ui_tui.panel import MAIN_PANELS, SIDEBAR_PANELS, PanelId

ALL_PANELS = set(PanelId)


def test_default_layout() -> None:
    regions = compute_layout(100, 41, ALL_PANELS)
    assert regions[PanelId.STATUS] == Region(0, 40, 100, 1)
    sidebar = [regions[panel] for panel in SIDEBAR_PANELS]
    assert [region.width for region in sidebar] == [20, 20, 20]
    assert [region.height for region in sidebar] == [13, 13, 14]
    assert [region.y for region in sidebar] == [0, 13, 26]
    assert regions[PanelId.QUERY] == Region(20, 0, 80, 8)
    assert regions[PanelId.OUTPUT] == Region(20, 8, 80, 32)


def test_hidden_panels_give_space_to_their_region() -> None:
    regions = compute_layout(100, 41, ALL_PANELS - {PanelId.DATABASES, PanelId.QUERY})
    assert PanelId.DATABASES not in regions
    assert regions[PanelId.CONNECTIONS] == Region(0, 0, 20, 20)
    assert regions[PanelId.TABLES] == Region(0, 20, 20, 20)
    assert regions[PanelId.OUTPUT] == Region(20, 0, 80, 40)


def test_empty_sidebar_yields_its_width() -> None:
    regions = compute_layout(100, 41, ALL_PANELS - set(SIDEBAR_PANELS))
    assert regions[PanelId.QUERY] == Region(0, 0, 100, 8)
    assert regions[PanelId.OUTPUT] == Region(0, 8, 100, 32)


def test_empty_main_region_yields_its_width() -> None:
    regions = compute_layout(90, 31, ALL_PANELS - set(MAIN_PANELS))
    assert [regions[panel].width for panel in SIDEBAR_PANELS] == [90, 90, 90]
    assert [regions[panel].height for panel in SIDEBAR_PANELS] == [10, 10, 10]


def test_custom_proportions() -> None:
    regions = compute_layout(120, 51, ALL_PANELS, sidebar_percent=25, top_percent=40)
    assert regions[PanelId.CONNECTIONS].width == 30
    assert regions[PanelId.QUERY] == Region(30, 0, 90, 20)
    assert regions[PanelId.OUTPUT] == Region(30, 20, 90, 30)


def test_regions_tile_the_screen() -> None:
    regions = compute_layout(97, 33, ALL_PANELS)
    area = sum(region.width * region.height for region in regions.values())
    assert area == 97 * 33


def test_degenerate_screen() -> None:
    regions = compute_layout(0, 0, ALL_PANELS)
    assert regions[PanelId.STATUS] == Region(0, 0, 0, 0)
    assert all(region.height == 0 for region in regions.values())


@pytest.mark.parametrize(
    ("total", "weights", "expected"),
    [
        (23, [20, 80], [4, 19]),
        (40, [1, 1, 1], [13, 13, 14]),
        (10, [1, 1], [5, 5]),
        (7, [], []),
        (5, [0, 0], [2, 3]),
    ],
)
def test_split(total: int, weights: list[int], expected: list[int]) -> None:
    assert split(total, weights) == expected
