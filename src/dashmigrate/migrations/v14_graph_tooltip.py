"""Replace the sharedCrosshair toggle with the graphTooltip mode.

graphTooltip is numeric so that it can express more than on/off:
0 = default, 1 = shared crosshair, 2 = shared tooltip.
"""

from dashmigrate.document import Document

VERSION = 14
DESCRIPTION = "Replace boolean sharedCrosshair with numeric graphTooltip"


def upgrade(dashboard: Document) -> None:
    """Convert sharedCrosshair into graphTooltip.

    Dashboards without sharedCrosshair keep whatever graphTooltip they have.
    """
    if "sharedCrosshair" not in dashboard:
        return

    shared = dashboard.pop("sharedCrosshair")
    dashboard["graphTooltip"] = 1 if shared else 0
