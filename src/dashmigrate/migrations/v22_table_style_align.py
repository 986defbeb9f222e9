"""Default table column styles to automatic alignment."""

from dashmigrate.document import Document, get_list, iter_panels, mappings

VERSION = 22
DESCRIPTION = "Set align to auto on table panel styles"


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        if panel.get("type") != "table":
            continue
        for style in mappings(get_list(panel, "styles")):
            style["align"] = "auto"
