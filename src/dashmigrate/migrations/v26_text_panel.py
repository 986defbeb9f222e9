"""Fold the interim ``text2`` panel back into ``text``."""

from dashmigrate.document import Document, get_mapping, iter_panels

VERSION = 26
DESCRIPTION = "Rename text2 panels to text"


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        if panel.get("type") != "text2":
            continue

        panel["type"] = "text"
        options = get_mapping(panel, "options")
        if options is not None:
            options.pop("angular", None)
