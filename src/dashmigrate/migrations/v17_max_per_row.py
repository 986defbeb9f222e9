"""Replace panel minSpan with maxPerRow.

minSpan constrained how narrow a repeated panel could get; maxPerRow
expresses the same thing as how many repeats fit side by side.
"""

from dashmigrate.document import Document, iter_panels
from dashmigrate.migrations.helpers import is_number
from dashmigrate.migrations.v16_grid_layout import GRID_COLUMN_COUNT

VERSION = 17
DESCRIPTION = "Replace panel minSpan with maxPerRow"

GRID_FACTORS = [n for n in range(1, GRID_COLUMN_COUNT + 1) if GRID_COLUMN_COUNT % n == 0]


def max_per_row(min_span: float) -> int | None:
    """Largest grid factor below the first factor exceeding 24 / min_span."""
    limit = GRID_COLUMN_COUNT / min_span
    for index, factor in enumerate(GRID_FACTORS):
        if factor > limit:
            return GRID_FACTORS[index - 1] if index > 0 else None
    return None


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        if "minSpan" not in panel:
            continue

        min_span = panel.pop("minSpan")
        if not is_number(min_span) or min_span <= 0:
            continue

        per_row = max_per_row(min_span)
        if per_row is not None:
            panel["maxPerRow"] = per_row
