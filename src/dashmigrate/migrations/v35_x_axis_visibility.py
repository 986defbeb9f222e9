"""Keep the time axis visible on time series with hidden axes.

Hiding axes through the field defaults used to hide only the value axes.
Once the setting applied to the time axis as well, panels relying on the
old behavior get an override that puts the time axis back.
"""

from __future__ import annotations

from typing import Any

from dashmigrate.document import Document, get_list, get_mapping, iter_panels, mappings

VERSION = 35
DESCRIPTION = "Add time axis override for timeseries panels with hidden axes"

AXIS_PLACEMENT = "custom.axisPlacement"


def _is_time_axis_override(override: dict[str, Any]) -> bool:
    matcher = get_mapping(override, "matcher")
    if matcher is None or matcher.get("id") != "byType" or matcher.get("options") != "time":
        return False
    return any(prop.get("id") == AXIS_PLACEMENT for prop in mappings(get_list(override, "properties")))


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        if panel.get("type") != "timeseries":
            continue

        field_config = get_mapping(panel, "fieldConfig")
        custom = get_mapping(get_mapping(field_config, "defaults"), "custom")
        if custom is None or custom.get("axisPlacement") != "hidden":
            continue

        overrides = get_list(field_config, "overrides")
        if overrides is None:
            if "overrides" in field_config:
                continue
            overrides = field_config["overrides"] = []
        if any(_is_time_axis_override(o) for o in mappings(overrides)):
            continue

        overrides.append({
            "matcher": {"id": "byType", "options": "time"},
            "properties": [{"id": AXIS_PLACEMENT, "value": "auto"}],
        })
