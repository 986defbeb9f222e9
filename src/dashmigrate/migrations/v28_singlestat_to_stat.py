"""Replace singlestat panels with stat panels and drop variable tag options.

The Angular singlestat panel (and its plugin twin ``grafana-singlestat-panel``)
was retired in favor of the stat panel. Its flat option keys are translated
into stat options and field config:

- ``valueName`` -> ``options.reduceOptions.calcs``
- ``format``, ``decimals``, ``nullText``, ``nullPointMode`` -> field defaults
- ``thresholds`` ("50,80") + ``colors`` -> absolute threshold steps
- ``valueMaps`` / ``rangeMaps`` -> value mappings
- ``sparkline.show`` -> ``graphMode``; ``colorBackground`` / ``colorValue`` -> ``colorMode``
- ``gauge.minValue`` / ``gauge.maxValue`` -> field min / max

Variable tag support was removed at the same time, so ``tags``,
``tagsQuery``, ``tagValuesQuery`` and ``useTags`` are deleted from every
variable.
"""

from __future__ import annotations

from typing import Any

from dashmigrate.document import (
    Document,
    get_list,
    get_mapping,
    get_number,
    get_str,
    iter_panels,
    iter_variables,
    mappings,
)
from dashmigrate.migrations.helpers import (
    LEGACY_RANGE_TO_TEXT,
    LEGACY_VALUE_TO_TEXT,
    parse_float,
    upgrade_value_mappings,
)

VERSION = 28
DESCRIPTION = "Migrate singlestat panels to stat and remove variable tag options"

SINGLESTAT_TYPES = frozenset({"singlestat", "grafana-singlestat-panel"})

REDUCERS = frozenset({
    "lastNotNull", "last", "firstNotNull", "first", "min", "max", "mean",
    "sum", "count", "range", "delta", "step", "diff", "logmin",
    "changeCount", "distinctCount", "diffperc", "allIsZero", "allIsNull",
})
REDUCER_ALIASES = {"avg": "mean", "current": "lastNotNull", "total": "sum"}
DEFAULT_REDUCER = "mean"

# Angular-only keys with no meaning once the panel is a stat panel
LEGACY_KEYS = (
    "valueName", "format", "decimals", "nullText", "nullPointMode",
    "tableColumn", "thresholds", "colors", "colorBackground", "colorValue",
    "colorPrefix", "colorPostfix", "sparkline", "gauge", "valueMaps",
    "rangeMaps", "mappingType", "mappingTypes", "prefix", "postfix",
    "prefixFontSize", "valueFontSize", "postfixFontSize",
)

VARIABLE_TAG_KEYS = ("tags", "tagsQuery", "tagValuesQuery", "useTags")


def reducer_for(value_name: str | None) -> str:
    """Map a singlestat valueName to a reducer id."""
    if value_name is None:
        return DEFAULT_REDUCER
    value_name = REDUCER_ALIASES.get(value_name, value_name)
    return value_name if value_name in REDUCERS else DEFAULT_REDUCER


def convert_thresholds(thresholds: Any, colors: Any) -> dict[str, Any] | None:
    """Turn ``"50,80"`` plus three colors into absolute threshold steps.

    There is one more color than threshold level; the first color becomes
    the base step with a null value.
    """
    if not isinstance(thresholds, str) or not isinstance(colors, list):
        return None

    levels = [parse_float(level) for level in thresholds.split(",")] if thresholds.strip() else []
    steps: list[dict[str, Any]] = []
    for color in colors:
        index = len(steps) - 1
        if index >= len(levels):
            break
        steps.append({"value": None if index < 0 else levels[index], "color": color})

    if not steps:
        return None
    return {"mode": "absolute", "steps": steps}


def convert_value_mappings(panel: dict[str, Any], thresholds: Any) -> list[Any]:
    """Convert ``valueMaps``/``rangeMaps`` according to ``mappingType``."""
    value_maps = get_list(panel, "valueMaps") or []
    range_maps = get_list(panel, "rangeMaps") or []

    mapping_type = get_number(panel, "mappingType")
    if not mapping_type:
        if value_maps:
            mapping_type = LEGACY_VALUE_TO_TEXT
        elif range_maps:
            mapping_type = LEGACY_RANGE_TO_TEXT

    if mapping_type == LEGACY_VALUE_TO_TEXT:
        source = value_maps
    elif mapping_type == LEGACY_RANGE_TO_TEXT:
        source = range_maps
    else:
        return []

    legacy = [
        {**entry, "id": index, "type": mapping_type}
        for index, entry in enumerate(mappings(source))
    ]
    return upgrade_value_mappings(legacy, thresholds)


def _color_mode(panel: dict[str, Any]) -> str:
    if panel.get("colorBackground"):
        return "background"
    if panel.get("colorValue"):
        return "value"
    return "none"


def migrate_panel(panel: dict[str, Any]) -> None:
    """Rewrite one singlestat panel in place as a stat panel."""
    field_config = get_mapping(panel, "fieldConfig") or {}
    defaults = dict(get_mapping(field_config, "defaults") or {})
    overrides = get_list(field_config, "overrides")

    unit = get_str(panel, "format")
    if unit:
        defaults["unit"] = unit

    null_point_mode = get_str(panel, "nullPointMode")
    if null_point_mode:
        defaults["nullValueMode"] = null_point_mode

    null_text = get_str(panel, "nullText")
    if null_text:
        defaults["noValue"] = null_text

    decimals = get_number(panel, "decimals")
    if decimals is not None:
        defaults["decimals"] = decimals

    thresholds = convert_thresholds(panel.get("thresholds"), panel.get("colors"))
    if thresholds is not None:
        defaults["thresholds"] = thresholds

    value_mappings = convert_value_mappings(panel, thresholds)
    if value_mappings:
        defaults["mappings"] = value_mappings

    gauge = get_mapping(panel, "gauge")
    if gauge is not None and gauge.get("show"):
        defaults["min"] = gauge.get("minValue")
        defaults["max"] = gauge.get("maxValue")

    table_column = get_str(panel, "tableColumn")
    sparkline = get_mapping(panel, "sparkline")

    options = get_mapping(panel, "options") or {}
    options.update({
        "reduceOptions": {
            "calcs": [reducer_for(get_str(panel, "valueName"))],
            "fields": f"/^{table_column}$/" if table_column else "",
            "values": False,
        },
        "orientation": "horizontal",
        "textMode": "auto",
        "colorMode": _color_mode(panel),
        "graphMode": "area" if sparkline is not None and sparkline.get("show") else "none",
        "justifyMode": "auto",
    })

    for key in LEGACY_KEYS:
        panel.pop(key, None)

    panel["type"] = "stat"
    panel["options"] = options
    panel["fieldConfig"] = {
        "defaults": defaults,
        "overrides": overrides if overrides is not None else [],
    }


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        if panel.get("type") in SINGLESTAT_TYPES:
            migrate_panel(panel)

    for variable in iter_variables(dashboard):
        for key in VARIABLE_TAG_KEYS:
            variable.pop(key, None)
