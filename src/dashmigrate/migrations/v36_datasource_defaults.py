"""Make every data source reference explicit.

After this version nothing relies on an implicit "default" data source:

- Annotation queries get a reference (a missing one resolves to the default).
- Query variables get a reference the same way.
- Panels with queries but no data source get the default data source, and
  each query without a data source uid inherits the panel's. Queries on a
  mixed panel inherit the default instead, since "mixed" isn't a real
  source. If the panel was on the default, it adopts the data source of its
  queries (expression queries aside) so the two agree.

Without a known default data source, the implicit references are left as
they are rather than guessed.
"""

from __future__ import annotations

import copy
from typing import Any

from dashmigrate.datasources import (
    EMPTY_INDEX,
    EXPRESSION_DATASOURCE_UID,
    MIXED_DATASOURCE,
    DataSourceIndex,
)
from dashmigrate.document import (
    Document,
    get_list,
    iter_annotations,
    iter_panels,
    iter_variables,
    mappings,
)

VERSION = 36
DESCRIPTION = "Resolve implicit default datasources to explicit references"
USES_DATASOURCES = True


def _resolve(container: dict[str, Any], datasources: DataSourceIndex) -> None:
    ref = datasources.to_ref(container.get("datasource"), default_as_null=False)
    if ref is not None:
        container["datasource"] = ref


def _has_uid(ref: Any) -> bool:
    return isinstance(ref, dict) and ref.get("uid") is not None


def migrate_panel(panel: dict[str, Any], datasources: DataSourceIndex) -> None:
    targets = get_list(panel, "targets")
    if not targets or panel.get("type") == "row":
        return

    panel_ref = panel.get("datasource")
    was_default = panel_ref is None
    if was_default:
        panel_ref = datasources.default_ref()
        if panel_ref is None:
            return
        panel["datasource"] = panel_ref
    elif not isinstance(panel_ref, dict):
        return

    inherited = panel_ref
    if panel_ref.get("uid") == MIXED_DATASOURCE:
        inherited = datasources.default_ref()

    for target in mappings(targets):
        if not _has_uid(target.get("datasource")) and inherited is not None:
            target["datasource"] = copy.deepcopy(inherited)

        target_ref = target.get("datasource")
        if was_default and _has_uid(target_ref) and target_ref["uid"] != EXPRESSION_DATASOURCE_UID:
            panel["datasource"] = copy.deepcopy(target_ref)


def upgrade(dashboard: Document, datasources: DataSourceIndex = EMPTY_INDEX) -> None:
    for annotation in iter_annotations(dashboard):
        _resolve(annotation, datasources)

    for variable in iter_variables(dashboard):
        if variable.get("type") == "query":
            _resolve(variable, datasources)

    for panel in iter_panels(dashboard):
        migrate_panel(panel, datasources)
