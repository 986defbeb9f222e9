"""Point data links at field labels instead of series labels."""

from __future__ import annotations

import re

from dashmigrate.document import Document, iter_panels
from dashmigrate.migrations.helpers import iter_data_link_lists, rewrite_link_urls

VERSION = 21
DESCRIPTION = "Rewrite __series.labels to __field.labels in data links"

SERIES_LABELS = re.compile(r"__series.labels")


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        for links in iter_data_link_lists(panel):
            rewrite_link_urls(links, lambda url: SERIES_LABELS.sub("__field.labels", url))
