"""Rename built-in data link variables to the dotted syntax.

``__series_name`` became ``__series.name``, ``__field_name`` became
``__field.name`` and ``__value_time`` became ``__value.time``. The
``$``-prefixed forms are wrapped in braces so the dot isn't read as the end
of the variable name.
"""

from __future__ import annotations

import re

from dashmigrate.document import Document, get_mapping, iter_panels
from dashmigrate.migrations.helpers import iter_data_link_lists, rewrite_link_urls

VERSION = 20
DESCRIPTION = "Rename legacy data link variables to dotted syntax"

LEGACY_VARIABLE_NAMES = re.compile(
    r"(__series_name)|(\$__series_name)|(__value_time)|(__field_name)|(\$__field_name)"
)

_REPLACEMENTS = {
    1: "__series.name",
    2: "${__series.name}",
    3: "__value.time",
    4: "__field.name",
    5: "${__field.name}",
}


def update_variables_syntax(text: str) -> str:
    """Rewrite every legacy variable reference in text."""
    return LEGACY_VARIABLE_NAMES.sub(lambda m: _REPLACEMENTS[m.lastindex], text)


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        for links in iter_data_link_lists(panel):
            rewrite_link_urls(links, update_variables_syntax)

        defaults = get_mapping(get_mapping(get_mapping(panel, "options"), "fieldOptions"), "defaults")
        if defaults is not None and isinstance(defaults.get("title"), str):
            defaults["title"] = update_variables_syntax(defaults["title"])
