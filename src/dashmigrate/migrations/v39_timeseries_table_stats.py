"""Restructure timeSeriesTable transformation options per refId.

``{"refIdToStat": {"A": "mean"}}`` becomes ``{"A": {"stat": "mean"}}`` so
that more per-query settings can be added next to the stat.
"""

from dashmigrate.document import Document, get_list, get_mapping, iter_panels, mappings

VERSION = 39
DESCRIPTION = "Restructure timeSeriesTable transformation options"


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        for transformation in mappings(get_list(panel, "transformations")):
            if transformation.get("id") != "timeSeriesTable":
                continue

            ref_id_to_stat = get_mapping(get_mapping(transformation, "options"), "refIdToStat")
            if ref_id_to_stat is None:
                continue

            transformation["options"] = {
                ref_id: {"stat": stat} for ref_id, stat in ref_id_to_stat.items()
            }
