"""Tests for the data source index."""

import pytest

from dashmigrate.config import Config, DataSourceConfig
from dashmigrate.datasources import (
    EMPTY_INDEX,
    GRAFANA_DATASOURCE,
    MIXED_DATASOURCE,
    DataSourceIndex,
    is_default_name,
)


class TestLookup:
    """Name and uid resolution."""

    def test_lookup_by_name_and_uid(self, datasources: DataSourceIndex) -> None:
        assert datasources.lookup("loki") == {"type": "loki", "uid": "loki-uid"}
        assert datasources.lookup("loki-uid") == {"type": "loki", "uid": "loki-uid"}
        assert datasources.lookup("unknown") is None

    def test_lookup_returns_fresh_dict(self, datasources: DataSourceIndex) -> None:
        ref = datasources.lookup("prom")
        ref["uid"] = "changed"
        assert datasources.lookup("prom")["uid"] == "prom-uid"

    def test_builtins_always_known(self) -> None:
        assert EMPTY_INDEX.lookup(GRAFANA_DATASOURCE) == {
            "type": "grafana",
            "uid": GRAFANA_DATASOURCE,
        }
        assert EMPTY_INDEX.lookup(MIXED_DATASOURCE) == {
            "type": "datasource",
            "uid": MIXED_DATASOURCE,
        }

    def test_len_excludes_builtins(self, datasources: DataSourceIndex) -> None:
        assert len(datasources) == 2
        assert len(EMPTY_INDEX) == 0

    def test_default(self, datasources: DataSourceIndex) -> None:
        assert datasources.default_uid == "prom-uid"
        assert datasources.default_ref() == {"type": "prometheus", "uid": "prom-uid"}
        assert EMPTY_INDEX.default_ref() is None

    def test_second_default_rejected(self) -> None:
        with pytest.raises(ValueError, match="More than one default"):
            DataSourceIndex([
                DataSourceConfig(name="a", uid="a", type="x", default=True),
                DataSourceConfig(name="b", uid="b", type="x", default=True),
            ])

    def test_from_config(self) -> None:
        config = Config(datasources=[DataSourceConfig(name="a", uid="a1", type="x")])
        index = DataSourceIndex.from_config(config)
        assert index.lookup("a") == {"type": "x", "uid": "a1"}


class TestToRef:
    """Converting legacy names into references."""

    @pytest.mark.parametrize("marker", [None, "", "default"])
    def test_default_markers(self, datasources: DataSourceIndex, marker) -> None:
        assert is_default_name(marker)
        assert datasources.to_ref(marker, default_as_null=True) is None
        assert datasources.to_ref(marker, default_as_null=False) == {
            "type": "prometheus",
            "uid": "prom-uid",
        }

    def test_reference_passes_through(self, datasources: DataSourceIndex) -> None:
        ref = {"type": "loki", "uid": "x"}
        assert datasources.to_ref(ref, default_as_null=True) is ref

    def test_unknown_name(self, datasources: DataSourceIndex) -> None:
        assert datasources.to_ref("gone", default_as_null=True) == {"uid": "gone"}

    def test_non_string_passes_through(self, datasources: DataSourceIndex) -> None:
        assert datasources.to_ref(5, default_as_null=True) == 5
