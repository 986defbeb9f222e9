"""Normalize the dashboard ``refresh`` interval to a string.

Older dashboards stored ``false`` (or nothing) to mean "no auto refresh";
the empty string now carries that meaning.
"""

from dashmigrate.document import Document

VERSION = 40
DESCRIPTION = "Coerce non-string refresh to empty string"


def upgrade(dashboard: Document) -> None:
    if not isinstance(dashboard.get("refresh"), str):
        dashboard["refresh"] = ""
