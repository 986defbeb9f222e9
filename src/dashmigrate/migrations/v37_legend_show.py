"""Split legend visibility out of displayMode into showLegend."""

from dashmigrate.document import Document, get_mapping, iter_panels

VERSION = 37
DESCRIPTION = "Add explicit showLegend to legend options"


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        legend = get_mapping(get_mapping(panel, "options"), "legend")
        if legend is None:
            continue

        if legend.get("displayMode") == "hidden" or legend.get("showLegend") is False:
            legend["displayMode"] = "list"
            legend["showLegend"] = False
        else:
            legend["showLegend"] = True
