from __future__ import annotations

import pandas as pd
import pytest

from engine.data import WEEKS, load_widget_data
from engine.registry import ViewType
from engine.widgets import WIDGETS, get_widget


def test_series_is_weekly_and_ends_on_anchor_day(now: pd.Timestamp) -> None:
    data = load_widget_data(get_widget("cycle-time"), now)
    rows = data[ViewType.CYCLE_TIME]
    assert len(rows) == WEEKS
    assert pd.Timestamp(rows[-1]["date"]) == now.normalize()
    gaps = {(pd.Timestamp(b["date"]) - pd.Timestamp(a["date"])).days for a, b in zip(rows, rows[1:])}
    assert gaps == {7}


def test_same_seed_same_data(now: pd.Timestamp) -> None:
    widget = get_widget("deployments")
    assert load_widget_data(widget, now) == load_widget_data(widget, now)
    assert load_widget_data(widget, now, seed=1) != load_widget_data(widget, now)


@pytest.mark.parametrize("key", list(WIDGETS))
def test_rows_carry_every_configured_metric(key: str, now: pd.Timestamp) -> None:
    widget = WIDGETS[key]
    data = load_widget_data(widget, now)
    for view_type, view in widget.registry.items():
        row = data[view_type][-1]
        for metric_key in set(view.metric_keys) | set(view.card_keys):
            assert metric_key in row, (view_type, metric_key)
        assert view.x_field in row


def test_deployment_counts_are_consistent(now: pd.Timestamp) -> None:
    rows = load_widget_data(get_widget("deployments"), now)[ViewType.DEPLOYMENT_COUNT]
    for row in rows:
        assert row["successful"] + row["failures"] == row["deployments"]
        assert 0 <= row["cfr"] <= 100


def test_callers_do_not_share_cached_rows(now: pd.Timestamp) -> None:
    widget = get_widget("cycle-time")
    first = load_widget_data(widget, now)
    original = first[ViewType.CYCLE_TIME][-1]["reviewTime"]
    first[ViewType.CYCLE_TIME][-1]["reviewTime"] = -999
    second = load_widget_data(widget, now)
    assert second[ViewType.CYCLE_TIME][-1]["reviewTime"] == original
