from __future__ import annotations

from engine.charts import build_chart, build_chart_spec
from engine.registry import ChartShape, MetricConfig

SERIES = [
    {"week": "W01", "a": 1, "b": 2},
    {"week": "W02", "a": 3, "b": 1},
]
METRICS = [MetricConfig(key="a", label="A"), MetricConfig(key="b", label="B", color="#ff0000")]


def test_area_chart_spec() -> None:
    spec = build_chart_spec(ChartShape.AREA, SERIES, METRICS, "week")
    assert spec["mark"]["type"] == "area"
    assert spec["encoding"]["x"]["field"] == "week"
    assert spec["encoding"]["color"]["scale"]["domain"] == ["A", "B"]
    assert spec["encoding"]["color"]["scale"]["range"][1] == "#ff0000"


def test_bar_shapes() -> None:
    stacked = build_chart_spec(ChartShape.STACKED_BAR, SERIES, METRICS, "week")
    grouped = build_chart_spec(ChartShape.BAR, SERIES, METRICS, "week")
    assert stacked["mark"]["type"] == "bar"
    assert stacked["encoding"]["y"]["stack"] == "zero"
    assert "xOffset" in grouped["encoding"]


def test_unsupported_shapes_and_empty_metrics() -> None:
    assert build_chart(ChartShape.SANKEY, SERIES, METRICS, "week") is None
    assert build_chart(ChartShape.CALENDAR, SERIES, METRICS, "week") is None
    assert build_chart_spec(ChartShape.AREA, SERIES, [], "week") is None
