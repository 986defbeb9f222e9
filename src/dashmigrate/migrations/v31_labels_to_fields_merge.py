"""Keep labelsToFields output as one frame.

labelsToFields stopped merging its output frames on its own; a ``merge``
transformation is inserted right after it to preserve the old result.
"""

from __future__ import annotations

from typing import Any

from dashmigrate.document import Document, get_list, iter_panels

VERSION = 31
DESCRIPTION = "Insert merge transformation after labelsToFields"

LABELS_TO_FIELDS = "labelsToFields"
MERGE = "merge"


def _transform_id(transformation: Any) -> Any:
    return transformation.get("id") if isinstance(transformation, dict) else None


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        transformations = get_list(panel, "transformations")
        if not transformations:
            continue
        if not any(_transform_id(t) == LABELS_TO_FIELDS for t in transformations):
            continue

        updated: list[Any] = []
        for index, transformation in enumerate(transformations):
            updated.append(transformation)
            if _transform_id(transformation) != LABELS_TO_FIELDS:
                continue
            following = transformations[index + 1] if index + 1 < len(transformations) else None
            if _transform_id(following) != MERGE:
                updated.append({"id": MERGE, "options": {}})

        panel["transformations"] = updated
