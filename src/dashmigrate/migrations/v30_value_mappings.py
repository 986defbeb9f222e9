"""Upgrade value mappings to the typed format and rename tooltipOptions.

Value mappings are upgraded both in field defaults (colored from the
default thresholds) and in ``mappings`` override properties. Time series and
XY chart panels also move ``options.tooltipOptions`` to ``options.tooltip``.
"""

from dashmigrate.document import Document, get_list, get_mapping, iter_panels, mappings
from dashmigrate.migrations.helpers import upgrade_value_mappings

VERSION = 30
DESCRIPTION = "Upgrade value mappings and rename tooltipOptions to tooltip"

TOOLTIP_PANEL_TYPES = frozenset({"timeseries", "xychart", "xychart2"})


def upgrade_panel_mappings(panel: dict) -> None:
    field_config = get_mapping(panel, "fieldConfig")
    if field_config is None:
        return

    defaults = get_mapping(field_config, "defaults")
    default_mappings = get_list(defaults, "mappings")
    if default_mappings is not None:
        defaults["mappings"] = upgrade_value_mappings(default_mappings, defaults.get("thresholds"))

    for override in mappings(get_list(field_config, "overrides")):
        for prop in mappings(get_list(override, "properties")):
            if prop.get("id") == "mappings" and isinstance(prop.get("value"), list):
                prop["value"] = upgrade_value_mappings(prop["value"])


def migrate_tooltip_options(panel: dict) -> None:
    if panel.get("type") not in TOOLTIP_PANEL_TYPES:
        return
    options = get_mapping(panel, "options")
    if options is not None and options.get("tooltipOptions"):
        options["tooltip"] = options.pop("tooltipOptions")


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        upgrade_panel_mappings(panel)
        migrate_tooltip_options(panel)
