"""Tests for data source reference steps and CloudWatch query splitting."""

import pytest

from dashmigrate.datasources import EMPTY_INDEX
from dashmigrate.migrations import (
    v33_panel_datasource_refs,
    v34_cloudwatch_statistics,
    v36_datasource_defaults,
)
from dashmigrate.migrations.v34_cloudwatch_statistics import next_ref_id, ref_id

PROM = {"type": "prometheus", "uid": "prom-uid"}
LOKI = {"type": "loki", "uid": "loki-uid"}


class TestPanelDatasourceRefs:
    """Version 33: names become references."""

    def test_panel_and_target_names(self, apply_step, datasources) -> None:
        doc = {
            "panels": [
                {
                    "datasource": "loki",
                    "targets": [
                        {"refId": "A", "datasource": "prom"},
                        {"refId": "B", "datasource": "archived"},
                        {"refId": "C"},
                        {"refId": "D", "datasource": None},
                    ],
                }
            ]
        }
        apply_step(v33_panel_datasource_refs, doc, datasources)
        panel = doc["panels"][0]
        assert panel["datasource"] == LOKI
        assert panel["targets"] == [
            {"refId": "A", "datasource": PROM},
            {"refId": "B", "datasource": {"uid": "archived"}},
            {"refId": "C"},
            {"refId": "D", "datasource": None},
        ]

    @pytest.mark.parametrize("marker", [None, "", "default"])
    def test_default_panel_datasource_is_null(self, apply_step, datasources, marker) -> None:
        doc = apply_step(v33_panel_datasource_refs, {"panels": [{"datasource": marker}]}, datasources)
        assert doc["panels"][0]["datasource"] is None

    def test_missing_key_not_added(self, apply_step, datasources) -> None:
        doc = apply_step(v33_panel_datasource_refs, {"panels": [{"type": "text"}]}, datasources)
        assert doc == {"panels": [{"type": "text"}]}

    def test_builtin_and_existing_refs(self, apply_step) -> None:
        doc = {"panels": [{"datasource": "-- Mixed --"}, {"datasource": PROM}]}
        apply_step(v33_panel_datasource_refs, doc)
        assert doc["panels"][0]["datasource"] == {"type": "datasource", "uid": "-- Mixed --"}
        assert doc["panels"][1]["datasource"] == PROM

    def test_empty_index_keeps_names_as_uids(self, apply_step) -> None:
        doc = apply_step(v33_panel_datasource_refs, {"panels": [{"datasource": "prom"}]}, EMPTY_INDEX)
        assert doc["panels"][0]["datasource"] == {"uid": "prom"}


class TestCloudWatchStatistics:
    """Version 34: one statistic per query."""

    @pytest.mark.parametrize("num, expected", [(0, "A"), (25, "Z"), (26, "AA"), (27, "AB"), (52, "BA")])
    def test_ref_id(self, num, expected) -> None:
        assert ref_id(num) == expected

    def test_next_ref_id(self) -> None:
        assert next_ref_id([{"refId": "A"}, {"refId": "C"}]) == "B"
        assert next_ref_id([]) == "A"

    def test_metric_query_split(self, apply_step) -> None:
        doc = {
            "panels": [
                {
                    "targets": [
                        {
                            "refId": "A",
                            "namespace": "AWS/EC2",
                            "dimensions": {"InstanceId": "i-1"},
                            "statistics": ["Average", "Maximum", "Minimum"],
                        },
                        {"refId": "B", "expr": "up"},
                    ]
                }
            ]
        }
        apply_step(v34_cloudwatch_statistics, doc)
        targets = doc["panels"][0]["targets"]
        assert [(t["refId"], t.get("statistic")) for t in targets] == [
            ("A", "Average"),
            ("B", None),
            ("C", "Maximum"),
            ("D", "Minimum"),
        ]
        assert all("statistics" not in t for t in targets)
        assert targets[2]["dimensions"] == {"InstanceId": "i-1"}
        assert targets[2]["dimensions"] is not targets[0]["dimensions"]

    def test_empty_statistics(self, apply_step) -> None:
        target = {"refId": "A", "namespace": "n", "dimensions": {}, "statistics": []}
        doc = apply_step(v34_cloudwatch_statistics, {"panels": [{"targets": [target]}]})
        assert doc["panels"][0]["targets"] == [{"refId": "A", "namespace": "n", "dimensions": {}}]

    def test_non_cloudwatch_untouched(self, apply_step) -> None:
        target = {"refId": "A", "statistics": ["Average", "Sum"]}
        doc = apply_step(v34_cloudwatch_statistics, {"panels": [{"targets": [dict(target)]}]})
        assert doc["panels"][0]["targets"] == [target]

    def test_annotation_split(self, apply_step) -> None:
        annotation = {
            "name": "Alarms",
            "namespace": "AWS/EC2",
            "dimensions": {},
            "region": "us-east-1",
            "prefixMatching": False,
            "statistics": ["Maximum", "Sum"],
        }
        doc = apply_step(v34_cloudwatch_statistics, {"annotations": {"list": [annotation]}})
        names = [(a["name"], a["statistic"]) for a in doc["annotations"]["list"]]
        assert names == [("Alarms - Maximum", "Maximum"), ("Alarms - Sum", "Sum")]

    def test_single_statistic_annotation_keeps_name(self, apply_step) -> None:
        annotation = {
            "name": "Alarms",
            "namespace": "AWS/EC2",
            "dimensions": {},
            "region": "us-east-1",
            "prefixMatching": False,
            "statistics": ["Maximum"],
        }
        doc = apply_step(v34_cloudwatch_statistics, {"annotations": {"list": [annotation]}})
        assert doc["annotations"]["list"][0]["name"] == "Alarms"
        assert doc["annotations"]["list"][0]["statistic"] == "Maximum"


class TestDatasourceDefaults:
    """Version 36: implicit default data sources made explicit."""

    def test_annotations_and_query_variables(self, apply_step, datasources) -> None:
        doc = {
            "annotations": {"list": [{"name": "a"}, {"name": "b", "datasource": "loki"}]},
            "templating": {
                "list": [
                    {"type": "query", "datasource": None},
                    {"type": "custom"},
                ]
            },
        }
        apply_step(v36_datasource_defaults, doc, datasources)
        assert doc["annotations"]["list"] == [
            {"name": "a", "datasource": PROM},
            {"name": "b", "datasource": LOKI},
        ]
        assert doc["templating"]["list"] == [{"type": "query", "datasource": PROM}, {"type": "custom"}]

    def test_panel_without_datasource_adopts_target_datasource(self, apply_step, datasources) -> None:
        doc = {"panels": [{"targets": [{"refId": "A"}, {"refId": "B", "datasource": LOKI}]}]}
        apply_step(v36_datasource_defaults, doc, datasources)
        panel = doc["panels"][0]
        assert panel["datasource"] == LOKI
        assert panel["targets"][0]["datasource"] == PROM

    def test_panel_on_default_with_expression(self, apply_step, datasources) -> None:
        expression = {"type": "__expr__", "uid": "__expr__"}
        doc = {"panels": [{"targets": [{"refId": "A"}, {"refId": "B", "datasource": expression}]}]}
        apply_step(v36_datasource_defaults, doc, datasources)
        panel = doc["panels"][0]
        assert panel["datasource"] == PROM
        assert panel["targets"][0]["datasource"] == PROM
        assert panel["targets"][1]["datasource"] == expression

    def test_targets_inherit_panel_datasource(self, apply_step, datasources) -> None:
        doc = {"panels": [{"datasource": LOKI, "targets": [{"refId": "A"}, {"refId": "B", "datasource": {"type": "loki"}}]}]}
        apply_step(v36_datasource_defaults, doc, datasources)
        targets = doc["panels"][0]["targets"]
        assert targets[0]["datasource"] == LOKI
        assert targets[1]["datasource"] == LOKI
        assert targets[0]["datasource"] is not doc["panels"][0]["datasource"]

    def test_mixed_panel_targets_get_default(self, apply_step, datasources) -> None:
        mixed = {"type": "datasource", "uid": "-- Mixed --"}
        doc = {"panels": [{"datasource": mixed, "targets": [{"refId": "A"}, {"refId": "B", "datasource": LOKI}]}]}
        apply_step(v36_datasource_defaults, doc, datasources)
        panel = doc["panels"][0]
        assert panel["datasource"] == mixed
        assert [t["datasource"] for t in panel["targets"]] == [PROM, LOKI]

    def test_rows_and_panels_without_targets_skipped(self, apply_step, datasources) -> None:
        doc = {"panels": [{"type": "row", "targets": [{"refId": "A"}]}, {"type": "text"}, {"targets": []}]}
        apply_step(v36_datasource_defaults, doc, datasources)
        assert doc == {"panels": [{"type": "row", "targets": [{"refId": "A"}]}, {"type": "text"}, {"targets": []}]}

    def test_no_default_known(self, apply_step) -> None:
        doc = {
            "annotations": {"list": [{"name": "a"}]},
            "panels": [{"targets": [{"refId": "A"}]}],
        }
        apply_step(v36_datasource_defaults, doc)
        assert doc == {
            "annotations": {"list": [{"name": "a"}]},
            "panels": [{"targets": [{"refId": "A"}]}],
        }
