from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd
import pytest

from engine.registry import ChartShape, MetricConfig, Polarity, Unit, ViewConfig, ViewRegistry, ViewType
from engine.widgets import Widget


@pytest.fixture
def now() -> pd.Timestamp:
    return pd.Timestamp("2024-03-31 14:30:00")


def weekly_rows(now: pd.Timestamp, weeks: int, **columns: List[float]) -> List[Dict[str, Any]]:
    rows = []
    for i in range(weeks):
        date = now.normalize() - pd.Timedelta(days=7 * (weeks - 1 - i))
        row: Dict[str, Any] = {"date": date.isoformat(), "week": f"W{i + 1:02d}"}
        for key, values in columns.items():
            row[key] = values[i]
        rows.append(row)
    return rows


@pytest.fixture
def registry() -> ViewRegistry:
    return ViewRegistry(
        [
            ViewConfig(
                view_type=ViewType.DISTRIBUTION,
                label="Distribution",
                metrics=(
                    MetricConfig(key="a", label="A"),
                    MetricConfig(key="b", label="B"),
                    MetricConfig(key="c", label="C"),
                ),
                shape=ChartShape.STACKED_BAR,
            ),
            ViewConfig(
                view_type=ViewType.STATUS,
                label="Status",
                metrics=(
                    MetricConfig(key="open", label="Open"),
                    MetricConfig(key="merged", label="Merged"),
                ),
                card_metrics=(
                    MetricConfig(key="open", label="Open"),
                    MetricConfig(key="merged", label="Merged"),
                    MetricConfig(key="ratio", label="Merge ratio", unit=Unit.PERCENT, target=80),
                ),
            ),
        ]
    )


@pytest.fixture
def widget(registry: ViewRegistry) -> Widget:
    return Widget(key="sample", title="Sample", registry=registry, page_size=2)


@pytest.fixture
def goal_widget() -> Widget:
    metrics = tuple(
        MetricConfig(key=f"m{i}", label=f"Metric {i}", target=10, polarity=Polarity.LOWER_IS_BETTER)
        for i in range(7)
    )
    registry = ViewRegistry([ViewConfig(view_type=ViewType.TEAM_GOALS, label="Goals", metrics=metrics)])
    return Widget(key="goals", title="Goals", registry=registry, page_size=3)


@pytest.fixture
def records(now: pd.Timestamp) -> Dict[ViewType, List[Dict[str, Any]]]:
    return {
        ViewType.DISTRIBUTION: weekly_rows(now, 6, a=[1, 2, 3, 4, 5, 6], b=[0, 0, 0, 0, 0, 0], c=[4, 4, 4, 4, 2, 8]),
        ViewType.STATUS: weekly_rows(now, 3, open=[5, 6, 3], merged=[1, 2, 4], ratio=[60, 70, 85]),
    }
