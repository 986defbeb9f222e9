"""Convert legacy panel links into data links.

Legacy links pointed at a dashboard by title (``dashboard``) or URI
(``dashUri``) and carried flags for keeping the time range and variables.
Data links are plain URLs with template variables for the same purpose.
"""

from __future__ import annotations

import re
from typing import Any

from dashmigrate.document import Document, get_list, iter_panels

VERSION = 19
DESCRIPTION = "Convert legacy panel links to data links"

KEEP_TIME_VARIABLE = "$__url_time_range"
INCLUDE_VARS_VARIABLE = "$__all_variables"

_NON_WORD = re.compile(r"[^\w ]+", re.ASCII)
_SPACES = re.compile(r" +")


def slugify_for_url(title: str) -> str:
    """Lowercase, strip punctuation, turn spaces into dashes."""
    return _SPACES.sub("-", _NON_WORD.sub("", title.lower()))


def append_query_to_url(url: str, query: str) -> str:
    """Append a query fragment, adding ``?`` or ``&`` as needed."""
    if not query:
        return url
    pos = url.find("?")
    if pos != -1:
        if len(url) - pos > 1:
            url += "&"
    else:
        url += "?"
    return url + query


def upgrade_panel_link(link: dict[str, Any]) -> dict[str, Any]:
    """Build the data link equivalent of one legacy link."""
    url = link.get("url") if isinstance(link.get("url"), str) else ""

    if not url and isinstance(link.get("dashboard"), str) and link["dashboard"]:
        url = f"dashboard/db/{slugify_for_url(link['dashboard'])}"
    if not url and isinstance(link.get("dashUri"), str) and link["dashUri"]:
        url = f"dashboard/{link['dashUri']}"
    # Some saved links have neither a target dashboard nor a URL
    if not url:
        url = "/"

    if link.get("keepTime"):
        url = append_query_to_url(url, KEEP_TIME_VARIABLE)
    if link.get("includeVars"):
        url = append_query_to_url(url, INCLUDE_VARS_VARIABLE)
    if isinstance(link.get("params"), str):
        url = append_query_to_url(url, link["params"])

    upgraded: dict[str, Any] = {"url": url}
    if "title" in link:
        upgraded["title"] = link["title"]
    if "targetBlank" in link:
        upgraded["targetBlank"] = link["targetBlank"]
    return upgraded


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        links = get_list(panel, "links")
        if links is None:
            continue
        panel["links"] = [
            upgrade_panel_link(link) if isinstance(link, dict) else link
            for link in links
        ]
