"""Convert the row-based layout to the 24-column grid layout.

Before version 16 a dashboard was a list of ``rows``, each with a pixel
height and a list of panels sized by ``span`` on a 12-column scale. From 16
on, panels live in a flat ``panels`` list and each carries an explicit
``gridPos`` on a 24-column grid with rows of ``GRID_CELL_HEIGHT`` pixels.

Panels are packed left to right within each row; when a panel doesn't fit
beside the previous ones it wraps below them. If any row is collapsed,
repeated or shows its title, every row also becomes a ``row`` panel so that
behavior survives the conversion. Collapsed rows keep their panels nested in
the row panel.
"""

from __future__ import annotations

import math
from typing import Any

from dashmigrate.document import Document, get_list, mappings
from dashmigrate.migrations.helpers import finite_float, is_number

VERSION = 16
DESCRIPTION = "Convert legacy rows layout to gridPos-based panels"

GRID_COLUMN_COUNT = 24
GRID_CELL_HEIGHT = 30
GRID_CELL_VMARGIN = 8
MIN_PANEL_HEIGHT = GRID_CELL_HEIGHT * 3
DEFAULT_ROW_HEIGHT = 250
DEFAULT_PANEL_SPAN = 4

# Legacy spans are on a 12-column scale
WIDTH_FACTOR = GRID_COLUMN_COUNT // 12


def _pixels(height: Any) -> float | None:
    if is_number(height):
        return finite_float(height)
    if isinstance(height, str):
        try:
            pixels = float(height.strip().removesuffix("px"))
        except ValueError:
            return None
        return pixels if math.isfinite(pixels) else None
    return None


def grid_height(height: Any, fallback: float = DEFAULT_ROW_HEIGHT) -> int:
    """Convert a pixel height ("250px" or 250) into grid rows."""
    pixels = _pixels(height)
    if pixels is None:
        pixels = fallback
    pixels = max(pixels, MIN_PANEL_HEIGHT)
    return math.ceil(pixels / (GRID_CELL_HEIGHT + GRID_CELL_VMARGIN))


def panel_width(span: Any) -> int:
    """Convert a 12-column span into grid columns."""
    if not is_number(span) or not span:
        span = DEFAULT_PANEL_SPAN
    width = math.floor(span) * WIDTH_FACTOR
    return min(max(width, 1), GRID_COLUMN_COUNT)


class RowArea:
    """Tracks how far down each grid column is filled within one legacy row.

    Attributes:
        area: Filled height per column, relative to y_pos.
        y_pos: Grid row where the current band of panels starts.
        height: Height of the legacy row in grid rows.
    """

    def __init__(self, height: int, width: int = GRID_COLUMN_COUNT, row_y: int = 0) -> None:
        self.area = [0] * width
        self.y_pos = row_y
        self.height = height

    def reset(self) -> None:
        self.area = [0] * len(self.area)

    def add_panel(self, grid_pos: dict[str, int]) -> None:
        """Mark the columns a placed panel covers."""
        bottom = grid_pos["y"] + grid_pos["h"] - self.y_pos
        for i in range(grid_pos["x"], min(grid_pos["x"] + grid_pos["w"], len(self.area))):
            if not self.area[i] or bottom > self.area[i]:
                self.area[i] = bottom

    def get_panel_position(
        self, panel_width: int, call_once: bool = False
    ) -> tuple[int, int] | None:
        """Find the left-most free slot wide enough for a panel.

        Scans from the right edge towards the left over columns that still
        have room. If the free run is too narrow, starts a new band below the
        current one and tries once more.

        Returns:
            (x, y) relative to y_pos, or None if the panel can't fit at all.
        """
        start: int | None = None
        end: int | None = None

        for i in range(len(self.area) - 1, -1, -1):
            if self.height - self.area[i] <= 0:
                break
            if end is None:
                end = i
            elif i < len(self.area) - 1 and self.area[i] <= self.area[i + 1]:
                start = i
            else:
                break

        if start is not None and end is not None and end - start >= panel_width - 1:
            return start, max(self.area[start:])

        if not call_once:
            self.y_pos += self.height
            self.reset()
            return self.get_panel_position(panel_width, call_once=True)

        return None


def _max_panel_id(rows: list[Any]) -> int:
    ids = [
        panel["id"]
        for row in mappings(rows)
        for panel in mappings(row.get("panels"))
        if is_number(panel.get("id"))
    ]
    return int(max(ids, default=0))


def upgrade(dashboard: Document) -> None:
    """Flatten ``rows`` into ``panels`` with grid positions."""
    rows = get_list(dashboard, "rows")
    if rows is None:
        return

    existing = get_list(dashboard, "panels")
    panels: list[Any] = existing if existing is not None else []

    next_row_id = _max_panel_id(rows) + 1
    show_rows = any(
        row.get("collapse") or row.get("showTitle") or row.get("repeat")
        for row in mappings(rows)
    )
    y_pos = 0

    for row in mappings(rows):
        # Repeated copies are regenerated at render time
        if row.get("repeatIteration"):
            continue

        row_grid_height = grid_height(row.get("height") or DEFAULT_ROW_HEIGHT)
        collapsed = bool(row.get("collapse"))
        row_panel: dict[str, Any] | None = None

        if show_rows:
            row_panel = {"id": next_row_id, "type": "row"}
            if "title" in row:
                row_panel["title"] = row["title"]
            row_panel["collapsed"] = collapsed
            if row.get("repeat"):
                row_panel["repeat"] = row["repeat"]
            row_panel["panels"] = []
            row_panel["gridPos"] = {"x": 0, "y": y_pos, "w": GRID_COLUMN_COUNT, "h": row_grid_height}
            panels.append(row_panel)
            next_row_id += 1
            y_pos += 1

        area = RowArea(row_grid_height, GRID_COLUMN_COUNT, y_pos)

        for panel in mappings(row.get("panels")):
            min_span = panel.get("minSpan")
            if is_number(min_span):
                panel["minSpan"] = min(GRID_COLUMN_COUNT, WIDTH_FACTOR * min_span)

            width = panel_width(panel.get("span"))
            height = grid_height(panel["height"]) if _pixels(panel.get("height")) else row_grid_height

            position = area.get_panel_position(width) or (0, 0)
            y_pos = area.y_pos
            panel["gridPos"] = {"x": position[0], "y": y_pos + position[1], "w": width, "h": height}
            area.add_panel(panel["gridPos"])
            panel.pop("span", None)

            if row_panel is not None and collapsed:
                row_panel["panels"].append(panel)
            else:
                panels.append(panel)

        if not (row_panel is not None and collapsed):
            y_pos += row_grid_height

    del dashboard["rows"]
    if existing is not None or panels:
        dashboard["panels"] = panels
