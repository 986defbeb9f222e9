"""Tests for table and transformation steps."""

from dashmigrate.migrations import (
    v22_table_style_align,
    v24_table_old,
    v31_labels_to_fields_merge,
    v38_table_cell_options,
    v39_timeseries_table_stats,
)
from dashmigrate.migrations.v38_table_cell_options import cell_options


class TestTableStyleAlign:
    """Version 22: table styles align automatically."""

    def test_styles_aligned(self, apply_step) -> None:
        doc = {
            "panels": [
                {"type": "table", "styles": [{"pattern": "a", "align": "left"}, {"pattern": "b"}, "x"]},
                {"type": "graph", "styles": [{"pattern": "c"}]},
            ]
        }
        apply_step(v22_table_style_align, doc)
        assert doc["panels"][0]["styles"] == [
            {"pattern": "a", "align": "auto"},
            {"pattern": "b", "align": "auto"},
            "x",
        ]
        assert doc["panels"][1]["styles"] == [{"pattern": "c"}]


class TestTableOld:
    """Version 24: styled Angular tables become table-old."""

    def test_styled_table_renamed(self, apply_step) -> None:
        doc = {
            "panels": [
                {"type": "table", "styles": []},
                {"type": "table", "fieldConfig": {}},
                {"type": "row", "panels": [{"type": "table", "styles": [{"pattern": "x"}]}]},
            ]
        }
        apply_step(v24_table_old, doc)
        assert doc["panels"][0]["type"] == "table-old"
        assert doc["panels"][1]["type"] == "table"
        assert doc["panels"][2]["panels"][0]["type"] == "table-old"


class TestLabelsToFieldsMerge:
    """Version 31: merge follows labelsToFields."""

    def test_merge_inserted(self, apply_step) -> None:
        doc = {
            "panels": [
                {
                    "transformations": [
                        {"id": "labelsToFields", "options": {"valueLabel": "job"}},
                        {"id": "organize", "options": {}},
                        {"id": "labelsToFields", "options": {}},
                    ]
                }
            ]
        }
        apply_step(v31_labels_to_fields_merge, doc)
        assert [t["id"] for t in doc["panels"][0]["transformations"]] == [
            "labelsToFields",
            "merge",
            "organize",
            "labelsToFields",
            "merge",
        ]
        assert doc["panels"][0]["transformations"][1] == {"id": "merge", "options": {}}

    def test_existing_merge_not_duplicated(self, apply_step) -> None:
        transformations = [{"id": "labelsToFields"}, {"id": "merge", "options": {"x": 1}}]
        doc = {"panels": [{"transformations": list(transformations)}]}
        apply_step(v31_labels_to_fields_merge, doc)
        assert doc["panels"][0]["transformations"] == transformations

    def test_other_transformations_untouched(self, apply_step) -> None:
        doc = {"panels": [{"transformations": [{"id": "reduce"}]}, {"transformations": []}]}
        apply_step(v31_labels_to_fields_merge, doc)
        assert doc == {"panels": [{"transformations": [{"id": "reduce"}]}, {"transformations": []}]}


class TestTableCellOptions:
    """Version 38: displayMode becomes cellOptions."""

    def test_cell_options_mapping(self) -> None:
        assert cell_options("color-background") == {"type": "color-background", "mode": "gradient"}
        assert cell_options("color-background-solid") == {"type": "color-background", "mode": "basic"}
        assert cell_options("gradient-gauge") == {"type": "gauge", "mode": "gradient"}
        assert cell_options("lcd-gauge") == {"type": "gauge", "mode": "lcd"}
        assert cell_options("basic") == {"type": "gauge", "mode": "basic"}
        assert cell_options("json-view") == {"type": "json-view"}
        assert cell_options("auto") == {"type": "auto"}

    def test_defaults_and_overrides(self, apply_step) -> None:
        doc = {
            "panels": [
                {
                    "type": "table",
                    "fieldConfig": {
                        "defaults": {"custom": {"displayMode": "lcd-gauge", "align": "left"}},
                        "overrides": [
                            {
                                "matcher": {"id": "byName", "options": "cpu"},
                                "properties": [
                                    {"id": "custom.displayMode", "value": "color-background"},
                                    {"id": "unit", "value": "percent"},
                                ],
                            }
                        ],
                    },
                }
            ]
        }
        apply_step(v38_table_cell_options, doc)
        field_config = doc["panels"][0]["fieldConfig"]
        assert field_config["defaults"]["custom"] == {
            "align": "left",
            "cellOptions": {"type": "gauge", "mode": "lcd"},
        }
        assert field_config["overrides"][0]["properties"] == [
            {"id": "custom.cellOptions", "value": {"type": "color-background", "mode": "gradient"}},
            {"id": "unit", "value": "percent"},
        ]

    def test_non_table_untouched(self, apply_step) -> None:
        panel = {"type": "timeseries", "fieldConfig": {"defaults": {"custom": {"displayMode": "basic"}}}}
        doc = apply_step(v38_table_cell_options, {"panels": [panel]})
        assert doc["panels"][0]["fieldConfig"]["defaults"]["custom"] == {"displayMode": "basic"}


class TestTimeSeriesTableStats:
    """Version 39: refIdToStat becomes per-refId options."""

    def test_restructured(self, apply_step) -> None:
        doc = {
            "panels": [
                {
                    "transformations": [
                        {"id": "timeSeriesTable", "options": {"refIdToStat": {"A": "mean", "B": "max"}}},
                        {"id": "timeSeriesTable", "options": {}},
                        {"id": "reduce", "options": {"refIdToStat": {"A": "mean"}}},
                    ]
                }
            ]
        }
        apply_step(v39_timeseries_table_stats, doc)
        transformations = doc["panels"][0]["transformations"]
        assert transformations[0] == {
            "id": "timeSeriesTable",
            "options": {"A": {"stat": "mean"}, "B": {"stat": "max"}},
        }
        assert transformations[1] == {"id": "timeSeriesTable", "options": {}}
        assert transformations[2] == {"id": "reduce", "options": {"refIdToStat": {"A": "mean"}}}
