"""Helpers shared by more than one migration step.

Only logic that genuinely belongs to several format changes lives here;
anything specific to a single version stays in that version's module.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterator
from typing import Any

from dashmigrate.document import get_list, get_mapping, mappings

# Leading numeric prefix, the way the dashboard frontend parses floats
_FLOAT_PREFIX = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")

# Numeric type tags used by legacy value mappings
LEGACY_VALUE_TO_TEXT = 1
LEGACY_RANGE_TO_TEXT = 2


# =============================================================================
# Scalars
# =============================================================================


def is_number(value: Any) -> bool:
    """True for finite ints and floats, but not booleans.

    NaN and infinities parse from JSON but have no grid or threshold meaning.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def finite_float(value: Any) -> float | None:
    """Convert a number to a finite float, or None if it has no float value."""
    if not is_number(value):
        return None
    try:
        return float(value)
    except OverflowError:
        return None


def parse_float(value: Any) -> float | None:
    """Parse a leading float from a string or pass numbers through.

    ``"12.5ms"`` parses as 12.5; strings without a numeric prefix yield None.
    """
    if is_number(value):
        return finite_float(value)
    if not isinstance(value, str):
        return None
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return None
    parsed = float(match.group(1))
    return parsed if math.isfinite(parsed) else None


def to_number(value: Any) -> int | float | None:
    """Coerce a number or numeric string, keeping integral values as ints."""
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


def to_key(value: Any) -> str:
    """Render a scalar as a mapping key: ``10`` -> ``"10"``, ``True`` -> ``"true"``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# Thresholds and value mappings
# =============================================================================


def active_threshold_color(value: float, thresholds: Any) -> str | None:
    """Color of the highest threshold step at or below value.

    A step whose value is null is the base step and matches everything.
    """
    steps = list(mappings(get_list(thresholds, "steps")))
    if not steps:
        return None

    active = steps[0]
    for step in steps:
        step_value = step.get("value")
        if step_value is None or (is_number(step_value) and value >= step_value):
            active = step
        else:
            break

    color = active.get("color")
    return color if isinstance(color, str) and color else None


def _result(text: Any, color: str | None) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if text is not None:
        result["text"] = text
    if color is not None:
        result["color"] = color
    return result


def upgrade_value_mappings(old_mappings: list[Any], thresholds: Any = None) -> list[Any]:
    """Convert legacy numeric-typed value mappings to the typed format.

    Legacy entries look like ``{"type": 1, "value": "0", "text": "down"}``
    or ``{"type": 2, "from": "0", "to": "10", "text": "low"}``. Value entries
    are folded into one leading ``{"type": "value", "options": {...}}``
    mapping; ranges become ``range`` mappings and the literal value
    ``"null"`` becomes a ``special`` mapping. Entries already in the new
    format, and anything unrecognised, are kept as they are.

    Args:
        old_mappings: Mapping list from a panel.
        thresholds: Optional thresholds config used to color the results.

    Returns:
        A new list; the input is not modified.
    """
    value_map: dict[str, Any] = {"type": "value", "options": {}}
    upgraded: list[Any] = []

    for old in old_mappings:
        mapping_type = old.get("type") if isinstance(old, dict) else None
        if isinstance(mapping_type, bool) or mapping_type not in (
            LEGACY_VALUE_TO_TEXT,
            LEGACY_RANGE_TO_TEXT,
        ):
            upgraded.append(old)
            continue

        text = old.get("text")
        color = None
        numeric = parse_float(text)
        if thresholds is not None and numeric is not None:
            color = active_threshold_color(numeric, thresholds)

        if mapping_type == LEGACY_VALUE_TO_TEXT:
            value = old.get("value")
            if value is None:
                continue
            if value == "null":
                upgraded.append({
                    "type": "special",
                    "options": {"match": "null", "result": _result(text, color)},
                })
            else:
                value_map["options"][to_key(value)] = _result(text, color)
        else:
            upgraded.append({
                "type": "range",
                "options": {
                    "from": to_number(old.get("from")),
                    "to": to_number(old.get("to")),
                    "result": _result(text, color),
                },
            })

    if value_map["options"]:
        upgraded.insert(0, value_map)

    return upgraded


# =============================================================================
# Data links
# =============================================================================


def iter_data_link_lists(panel: dict[str, Any]) -> Iterator[list[Any]]:
    """Yield the data-link lists a panel carries in its options.

    Graph panels keep them in ``options.dataLinks``; panels with field
    options keep them in ``options.fieldOptions.defaults.links``.
    """
    options = get_mapping(panel, "options")

    data_links = get_list(options, "dataLinks")
    if data_links is not None:
        yield data_links

    defaults = get_mapping(get_mapping(options, "fieldOptions"), "defaults")
    field_links = get_list(defaults, "links")
    if field_links is not None:
        yield field_links


def rewrite_link_urls(links: list[Any], rewrite: Callable[[str], str]) -> None:
    """Apply rewrite to every string ``url`` in a link list, in place."""
    for link in mappings(links):
        url = link.get("url")
        if isinstance(url, str):
            link["url"] = rewrite(url)
