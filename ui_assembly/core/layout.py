"""Layout engine: positions for the active set under a layout key.

WHY: When the conversation moves from "greeting" to "browsing", the
surface needs every component re-placed under a new arrangement. The
computation is pure and deterministic so that reorganizing twice with
the same key yields the same positions.

HOW: compute_positions() walks the components in input order and
assigns each a Position according to the layout key. Orders come from
the stable input index, never from set or dict iteration, so ties are
impossible. LayoutEngine wraps the function and remembers the last key
it applied, for snapshots.

RULES:
- centered:   area "center", order = index, width 100%, max width 600px
- two-column: sidebar types → "sidebar" (300px), others → "main" (100%),
              each ordered among its own members
- grid:       area "grid", 3 fixed columns, row-major, width auto
- any other key (including "default"): area "main", order = index, width 100%
- Sidebar membership is an exact type-name match
"""

from __future__ import annotations

from typing import AbstractSet, Dict, Sequence

from ui_assembly.config import SIDEBAR_TYPES
from ui_assembly.core.ir import ComponentState, Position

GRID_COLUMNS = 3

DEFAULT_LAYOUT = "default"


def compute_positions(
    components: Sequence[ComponentState],
    layout_key: str,
    sidebar_types: AbstractSet[str] = SIDEBAR_TYPES,
) -> Dict[str, Position]:
    """Compute a Position for every component under ``layout_key``.

    Args:
        components: Active components in their current (insertion) order.
        layout_key: Layout name; unknown keys fall back to the default layout.
        sidebar_types: Type names that go to the sidebar in two-column.

    Returns:
        Mapping of component id to its new Position.
    """
    positions: Dict[str, Position] = {}

    if layout_key == "centered":
        for index, component in enumerate(components):
            positions[component.id] = Position(
                area="center", order=index, width="100%", max_width="600px",
            )

    elif layout_key == "two-column":
        sidebar_index = 0
        main_index = 0
        for component in components:
            if component.type in sidebar_types:
                positions[component.id] = Position(
                    area="sidebar", order=sidebar_index, width="300px",
                )
                sidebar_index += 1
            else:
                positions[component.id] = Position(
                    area="main", order=main_index, width="100%",
                )
                main_index += 1

    elif layout_key == "grid":
        for index, component in enumerate(components):
            positions[component.id] = Position(
                area="grid",
                order=index,
                width="auto",
                grid_column=(index % GRID_COLUMNS) + 1,
                grid_row=(index // GRID_COLUMNS) + 1,
            )

    else:
        for index, component in enumerate(components):
            positions[component.id] = Position(area="main", order=index, width="100%")

    return positions


class LayoutEngine:
    """Applies layout keys and remembers the most recent one."""

    def __init__(self, sidebar_types: AbstractSet[str] = SIDEBAR_TYPES) -> None:
        self._sidebar_types = frozenset(sidebar_types)
        self._current_layout = DEFAULT_LAYOUT

    @property
    def current_layout(self) -> str:
        return self._current_layout

    def calculate_positions(
        self,
        components: Sequence[ComponentState],
        layout_key: str,
    ) -> Dict[str, Position]:
        positions = compute_positions(components, layout_key, self._sidebar_types)
        self._current_layout = layout_key
        return positions
