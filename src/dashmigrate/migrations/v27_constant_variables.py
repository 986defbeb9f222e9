"""Turn visible constant variables into textboxes.

Constants were meant to be hidden; a constant shown on the dashboard behaves
like an editable textbox, so it becomes one. Every constant also gets its
current value and options rebuilt from its query.
"""

from dashmigrate.document import Document, get_number, iter_variables

VERSION = 27
DESCRIPTION = "Convert visible constant variables to textbox"

HIDE_NONE = 0
HIDE_LABEL = 1


def upgrade(dashboard: Document) -> None:
    for variable in iter_variables(dashboard):
        if variable.get("type") != "constant":
            continue

        if get_number(variable, "hide") in (HIDE_NONE, HIDE_LABEL):
            variable["type"] = "textbox"

        query = variable.get("query")
        if query is None:
            query = ""

        current = {"selected": True, "text": query, "value": query}
        variable["current"] = current
        variable["options"] = [dict(current)]
