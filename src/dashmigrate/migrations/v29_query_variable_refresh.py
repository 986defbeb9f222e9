"""Query variables always refresh and never persist their options.

Options of a query variable are computed from its data source, so saved
options only go stale. ``refresh`` must be 1 (on dashboard load) or 2 (on
time range change); "never" is upgraded to on load.
"""

from dashmigrate.document import Document, get_list, get_number, iter_variables

VERSION = 29
DESCRIPTION = "Force query variable refresh and clear persisted options"

REFRESH_ON_LOAD = 1
REFRESH_ON_TIME_RANGE_CHANGE = 2


def upgrade(dashboard: Document) -> None:
    for variable in iter_variables(dashboard):
        if variable.get("type") != "query":
            continue

        if get_number(variable, "refresh") not in (REFRESH_ON_LOAD, REFRESH_ON_TIME_RANGE_CHANGE):
            variable["refresh"] = REFRESH_ON_LOAD

        if get_list(variable, "options"):
            variable["options"] = []
