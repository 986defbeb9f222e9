"""Move styled Angular table panels to the ``table-old`` panel type.

The ``table`` type now names the React table. Angular tables that carry
column ``styles`` depend on the old implementation and keep it under a new
name; unstyled tables render the same either way and stay ``table``.
"""

from dashmigrate.document import Document, get_list, iter_panels

VERSION = 24
DESCRIPTION = "Rename styled Angular table panels to table-old"


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        if panel.get("type") == "table" and get_list(panel, "styles") is not None:
            panel["type"] = "table-old"
