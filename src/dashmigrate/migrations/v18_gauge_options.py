"""Move gauge panel options from ``options-gauge`` into ``options``.

The display settings that used to sit at the top of the gauge options
(unit, stat, decimals, prefix, suffix) are grouped under
``options.valueOptions``.
"""

from dashmigrate.document import Document, get_mapping, iter_panels

VERSION = 18
DESCRIPTION = "Move options-gauge into options with grouped valueOptions"

VALUE_OPTION_KEYS = ("unit", "stat", "decimals", "prefix", "suffix")


def upgrade(dashboard: Document) -> None:
    for panel in iter_panels(dashboard):
        gauge = get_mapping(panel, "options-gauge")
        if gauge is None:
            continue

        options = dict(gauge)
        options["valueOptions"] = {key: gauge[key] for key in VALUE_OPTION_KEYS if key in gauge}
        for key in VALUE_OPTION_KEYS:
            options.pop(key, None)
        # Nested by mistake in some saved gauges
        options.pop("options", None)

        panel["options"] = options
        del panel["options-gauge"]
