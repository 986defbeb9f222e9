"""In-memory data source lookup for reference migrations.

Old dashboards name their data sources by display name (``"datasource":
"prod-prometheus"``); current ones carry a reference object
(``{"type": "prometheus", "uid": "P1809F7CD0C75ACF3"}``). Converting one into
the other needs to know which data sources exist, but the migration engine
performs no I/O, so the caller hands it a ``DataSourceIndex`` built up front
(from configuration, or from whatever the embedding application knows).

The index is immutable once built and safe to share between threads.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dashmigrate.config import Config, DataSourceConfig

GRAFANA_DATASOURCE = "-- Grafana --"
MIXED_DATASOURCE = "-- Mixed --"
DASHBOARD_DATASOURCE = "-- Dashboard --"
EXPRESSION_DATASOURCE_UID = "__expr__"

# Special data sources that exist in every installation
BUILTIN_REFS: dict[str, tuple[str, str]] = {
    GRAFANA_DATASOURCE: ("grafana", GRAFANA_DATASOURCE),
    MIXED_DATASOURCE: ("datasource", MIXED_DATASOURCE),
    DASHBOARD_DATASOURCE: ("datasource", DASHBOARD_DATASOURCE),
}


def is_default_name(value: Any) -> bool:
    """True for the legacy spellings of "use the default data source"."""
    return value is None or value == "" or value == "default"


class DataSourceIndex:
    """Immutable lookup from data source name or uid to a reference.

    Attributes:
        default_uid: Uid of the default data source, if one is known.
    """

    def __init__(self, datasources: Iterable[DataSourceConfig] = ()) -> None:
        by_name: dict[str, tuple[str, str]] = dict(BUILTIN_REFS)
        by_uid: dict[str, tuple[str, str]] = {
            uid: (ds_type, uid) for ds_type, uid in BUILTIN_REFS.values()
        }
        default: tuple[str, str] | None = None

        for ds in datasources:
            ref = (ds.type, ds.uid)
            by_name[ds.name] = ref
            by_uid[ds.uid] = ref
            if ds.default:
                if default is not None:
                    raise ValueError(
                        f"More than one default data source: {default[1]}, {ds.uid}"
                    )
                default = ref

        self._by_name = MappingProxyType(by_name)
        self._by_uid = MappingProxyType(by_uid)
        self._default = default

    @classmethod
    def from_config(cls, config: Config) -> "DataSourceIndex":
        """Build an index from the ``datasources`` configuration section."""
        return cls(config.datasources)

    @property
    def default_uid(self) -> str | None:
        return self._default[1] if self._default else None

    def __len__(self) -> int:
        return len(self._by_uid) - len(BUILTIN_REFS)

    def lookup(self, name_or_uid: str) -> dict[str, str] | None:
        """Find a data source by name, falling back to uid.

        Returns:
            A fresh ``{"type", "uid"}`` dict, or None if unknown.
        """
        ref = self._by_name.get(name_or_uid) or self._by_uid.get(name_or_uid)
        if ref is None:
            return None
        return {"type": ref[0], "uid": ref[1]}

    def default_ref(self) -> dict[str, str] | None:
        """Reference to the default data source, or None if none is configured."""
        if self._default is None:
            return None
        return {"type": self._default[0], "uid": self._default[1]}

    def to_ref(self, name_or_ref: Any, *, default_as_null: bool) -> Any:
        """Convert a legacy data source name into a reference.

        Args:
            name_or_ref: A name, an existing reference, or a default marker.
            default_as_null: Return None for default markers instead of
                resolving them to the default data source.

        Returns:
            The converted reference. Existing reference objects, and values
            that are neither strings nor None, are returned unchanged. An
            unknown name becomes ``{"uid": name}``.
        """
        if isinstance(name_or_ref, dict):
            return name_or_ref
        if is_default_name(name_or_ref):
            return None if default_as_null else self.default_ref()
        if not isinstance(name_or_ref, str):
            return name_or_ref

        ref = self.lookup(name_or_ref)
        if ref is None:
            return {"uid": name_or_ref}
        return ref


EMPTY_INDEX = DataSourceIndex()
