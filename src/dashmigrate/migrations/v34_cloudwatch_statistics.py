"""Split multi-statistic CloudWatch queries into one query per statistic.

CloudWatch metric and annotation queries used to accept a ``statistics``
list; they now take a single ``statistic``. The first statistic stays on
the original query and each additional one gets its own copy, appended after
the existing queries. New metric queries get the next free refId; new
annotations are named ``"<name> - <statistic>"``.
"""

from __future__ import annotations

import copy
import string
from typing import Any

from dashmigrate.document import Document, get_list, iter_annotations, iter_panels, mappings

VERSION = 34
DESCRIPTION = "Split CloudWatch queries with multiple statistics"

METRIC_QUERY_KEYS = ("dimensions", "namespace", "statistics")
ANNOTATION_QUERY_KEYS = ("dimensions", "namespace", "region", "prefixMatching", "statistics")


def ref_id(num: int) -> str:
    """The num-th refId: A..Z, then AA, AB, ..."""
    letters = string.ascii_uppercase
    if num < len(letters):
        return letters[num]
    return ref_id(num // len(letters) - 1) + letters[num % len(letters)]


def next_ref_id(queries: list[Any]) -> str:
    """First refId not used by any query."""
    used = {query.get("refId") for query in mappings(queries)}
    num = 0
    while ref_id(num) in used:
        num += 1
    return ref_id(num)


def _is_legacy(query: dict[str, Any], keys: tuple[str, ...]) -> bool:
    return all(key in query for key in keys) and isinstance(query["statistics"], list)


def split_metric_query(query: dict[str, Any], targets: list[Any]) -> None:
    """Split one metric query, appending the extra queries to targets."""
    statistics = query.pop("statistics")
    if not statistics:
        return

    query["statistic"] = statistics[0]
    for statistic in statistics[1:]:
        extra = copy.deepcopy(query)
        extra["statistic"] = statistic
        extra["refId"] = next_ref_id(targets)
        targets.append(extra)


def split_annotation_query(annotation: dict[str, Any]) -> list[dict[str, Any]]:
    """Split one annotation query, returning the extra annotations."""
    statistics = annotation.pop("statistics")
    if not statistics:
        return []

    name = annotation.get("name")
    base_name = "" if name is None else str(name)
    extras = []
    for statistic in statistics[1:]:
        extra = copy.deepcopy(annotation)
        extra["statistic"] = statistic
        extra["name"] = f"{base_name} - {statistic}"
        extras.append(extra)

    annotation["statistic"] = statistics[0]
    if extras:
        annotation["name"] = f"{base_name} - {statistics[0]}"
    return extras


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        targets = get_list(panel, "targets")
        if targets is None:
            continue
        for target in list(mappings(targets)):
            if _is_legacy(target, METRIC_QUERY_KEYS):
                split_metric_query(target, targets)

    annotations = list(iter_annotations(dashboard))
    extras: list[dict[str, Any]] = []
    for annotation in annotations:
        if _is_legacy(annotation, ANNOTATION_QUERY_KEYS):
            extras.extend(split_annotation_query(annotation))

    if extras:
        dashboard["annotations"]["list"].extend(extras)
