"""Remove the deprecated ``timepicker.time_options`` list.

The list of quick relative ranges is no longer configurable per dashboard.
A dashboard without a timepicker is left without one.
"""

from dashmigrate.document import Document, get_mapping

VERSION = 41
DESCRIPTION = "Remove deprecated timepicker.time_options"


def upgrade(dashboard: Document) -> None:
    """Drop time_options from the timepicker, if both exist."""
    timepicker = get_mapping(dashboard, "timepicker")
    if timepicker is not None:
        timepicker.pop("time_options", None)
