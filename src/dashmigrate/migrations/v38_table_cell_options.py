"""Replace table ``displayMode`` with structured ``cellOptions``.

Applies to the field defaults and to ``custom.displayMode`` override
properties of table panels.
"""

from __future__ import annotations

from typing import Any

from dashmigrate.document import Document, get_list, get_mapping, iter_panels, mappings

VERSION = 38
DESCRIPTION = "Migrate table displayMode to cellOptions"

CELL_OPTIONS_BY_DISPLAY_MODE: dict[str, dict[str, str]] = {
    "color-background": {"type": "color-background", "mode": "gradient"},
    "color-background-solid": {"type": "color-background", "mode": "basic"},
    "gradient-gauge": {"type": "gauge", "mode": "gradient"},
    "lcd-gauge": {"type": "gauge", "mode": "lcd"},
    "basic": {"type": "gauge", "mode": "basic"},
}


def cell_options(display_mode: Any) -> dict[str, Any]:
    """Cell options equivalent to a legacy display mode."""
    if isinstance(display_mode, str) and display_mode in CELL_OPTIONS_BY_DISPLAY_MODE:
        return dict(CELL_OPTIONS_BY_DISPLAY_MODE[display_mode])
    return {"type": display_mode}


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        if panel.get("type") != "table":
            continue

        field_config = get_mapping(panel, "fieldConfig")
        if field_config is None:
            continue

        custom = get_mapping(get_mapping(field_config, "defaults"), "custom")
        if custom is not None and "displayMode" in custom:
            custom["cellOptions"] = cell_options(custom.pop("displayMode"))

        for override in mappings(get_list(field_config, "overrides")):
            for prop in mappings(get_list(override, "properties")):
                if prop.get("id") == "custom.displayMode":
                    prop["id"] = "custom.cellOptions"
                    prop["value"] = cell_options(prop.get("value"))
