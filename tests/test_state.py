from __future__ import annotations

import pandas as pd
import pytest

from engine.controls import Action
from engine.registry import ViewType
from engine.state import (
    DashboardEngine,
    apply_action,
    derive_view,
    freeze_records,
    initial_state,
    normalize_state,
    state_to_dict,
)
from engine.summary import ChangeType
from engine.timewindow import TimeRange
from engine.widgets import Widget, get_widget


def test_initial_state(widget: Widget) -> None:
    state = initial_state(widget)
    assert state.view_type == ViewType.DISTRIBUTION
    assert state.time_range == TimeRange.ONE_YEAR
    assert state.cursor.page_index == 0
    assert state.cursor.page_size == 2


def test_derive_view_filters_summarizes_and_paginates(widget: Widget, records, now: pd.Timestamp) -> None:
    state = initial_state(widget)
    view = derive_view(widget, state, freeze_records(widget, records), now)
    assert len(view.chart_series) == 6
    assert view.table_rows == view.chart_series[::-1]
    assert [m.key for m in view.chart_metrics] == ["a", "b", "c"]
    assert [c.key for c in view.cards] == ["a", "b", "c"]
    assert [c.key for c in view.page.items] == ["a", "b"]
    assert view.page.total_pages == 2
    assert view.cards[0].value == 6
    assert view.cards[0].change == 20
    assert view.cards[0].change_type == ChangeType.FAVORABLE
    assert view.cards[2].change == 300
    assert view.controls.show_view_type_selector


def test_time_range_narrows_the_series(widget: Widget, records, now: pd.Timestamp) -> None:
    state = apply_action(initial_state(widget), widget, Action.SET_TIME_RANGE, "15days")
    view = derive_view(widget, state, freeze_records(widget, records), now)
    assert state.time_range == TimeRange.FIFTEEN_DAYS
    assert len(view.chart_series) == 3


def test_derive_view_is_deterministic(widget: Widget, records, now: pd.Timestamp) -> None:
    state = initial_state(widget)
    frozen = freeze_records(widget, records)
    assert derive_view(widget, state, frozen, now) == derive_view(widget, state, frozen, now)


def test_derive_view_rejects_invalid_now(widget: Widget, records) -> None:
    with pytest.raises(ValueError):
        derive_view(widget, initial_state(widget), freeze_records(widget, records), "not-a-time")


def test_page_resets_when_selection_changes(widget: Widget) -> None:
    state = apply_action(initial_state(widget), widget, Action.NEXT_PAGE)
    assert state.cursor.page_index == 1
    assert apply_action(state, widget, Action.NEXT_PAGE) is state

    for action, value in [
        (Action.TOGGLE_CARD_METRIC, "a"),
        (Action.TOGGLE_CHART_METRIC, "a"),
        (Action.SET_VIEW_TYPE, "status"),
        (Action.SET_TIME_RANGE, "1week"),
        (Action.SET_CARD_SELECTION, ["a", "b"]),
    ]:
        moved = apply_action(state, widget, action, value)
        assert moved.cursor.page_index == 0, action


def test_no_op_actions_keep_the_same_state(widget: Widget) -> None:
    state = initial_state(widget)
    assert apply_action(state, widget, Action.PREVIOUS_PAGE) is state
    assert apply_action(state, widget, Action.SET_TIME_RANGE, "1year") is state
    assert apply_action(state, widget, Action.SET_VIEW_TYPE, "distribution") is state
    assert apply_action(state, widget, Action.TOGGLE_CHART_METRIC, "unknown") is state


def test_unknown_action_raises(widget: Widget) -> None:
    with pytest.raises(ValueError):
        apply_action(initial_state(widget), widget, "explode")


def test_card_selection_accepts_single_key(widget: Widget) -> None:
    state = apply_action(initial_state(widget), widget, Action.SET_CARD_SELECTION, "b")
    assert state.selection.card_selection == ("b",)


def test_normalize_state_repairs_bad_input(widget: Widget) -> None:
    state = normalize_state(
        {
            "view_type": "status",
            "time_range": "forever",
            "chart_selection": {"status": [], "distribution": ["c", "zz", "c"], "bogus": ["a"]},
            "card_selection": {"status": ["ratio", "nope"]},
            "page_index": 9,
            "page_size": "x",
        },
        widget,
    )
    assert state.view_type == ViewType.STATUS
    assert state.time_range == TimeRange.ONE_YEAR
    assert state.selection.chart[ViewType.STATUS] == ("open", "merged")
    assert state.selection.chart[ViewType.DISTRIBUTION] == ("c",)
    assert state.selection.card_selection == ("ratio",)
    assert state.cursor.page_size == 2
    assert state.cursor.page_index == 0


def test_normalize_state_allows_empty_cards(widget: Widget) -> None:
    state = normalize_state({"card_selection": {"distribution": []}}, widget)
    assert state.selection.card_selection == ()
    assert state.selection.chart_selection == ("a", "b", "c")


def test_state_dict_round_trips_through_normalize(widget: Widget) -> None:
    state = apply_action(initial_state(widget), widget, Action.TOGGLE_CHART_METRIC, "b")
    state = apply_action(state, widget, Action.NEXT_PAGE)
    assert normalize_state(state_to_dict(state), widget) == state


def test_freeze_records_accepts_a_plain_sequence(widget: Widget, records) -> None:
    frozen = freeze_records(widget, records[ViewType.DISTRIBUTION])
    assert list(frozen) == [ViewType.DISTRIBUTION]
    assert freeze_records(widget, {"unknown": [{}], "status": None}) == {ViewType.STATUS: ()}


def test_engine_dispatches_and_views(widget: Widget, records, now: pd.Timestamp) -> None:
    engine = DashboardEngine(widget, records, clock=lambda: now)
    engine.set_view_type("status")
    engine.toggle_card_metric("open")
    view = engine.view()
    assert view.view_type == ViewType.STATUS
    assert [c.key for c in view.cards] == ["merged", "ratio"]
    ratio = view.cards[1]
    assert ratio.display_value == "85.0%"
    assert ratio.change_type == ChangeType.FAVORABLE

    engine.refresh({"status": records[ViewType.STATUS][:1]})
    assert len(engine.view().chart_series) == 1


def test_goal_widget_pages_through_seven_cards(goal_widget: Widget, now: pd.Timestamp) -> None:
    rows = [{"date": now, **{f"m{i}": i for i in range(7)}}]
    engine = DashboardEngine(goal_widget, rows, clock=lambda: now)
    seen = []
    for _ in range(3):
        seen.extend(c.key for c in engine.view().page.items)
        engine.next_page()
    assert seen == [f"m{i}" for i in range(7)]
    assert engine.view().page.page_index == 2


def test_rising_cycle_time_is_unfavorable(now: pd.Timestamp) -> None:
    rows = [
        {"date": now - pd.Timedelta(days=7), "codingTime": 5, "pickupTime": 5, "reviewTime": 10, "mergeTime": 5},
        {"date": now, "codingTime": 5, "pickupTime": 5, "reviewTime": 20, "mergeTime": 5},
    ]
    cards = {c.key: c for c in DashboardEngine(get_widget("cycle-time"), rows, clock=lambda: now).view().cards}
    assert cards["reviewTime"].change == 100
    assert cards["reviewTime"].change_type == ChangeType.UNFAVORABLE
    assert cards["codingTime"].change_type == ChangeType.NEUTRAL


def test_more_deployment_failures_is_unfavorable(now: pd.Timestamp) -> None:
    rows = [
        {"date": now - pd.Timedelta(days=7), "deployments": 20, "failures": 1, "successful": 19, "cfr": 5.0, "mtr": 40},
        {"date": now, "deployments": 25, "failures": 5, "successful": 20, "cfr": 20.0, "mtr": 80},
    ]
    cards = {c.key: c for c in DashboardEngine(get_widget("deployments"), rows, clock=lambda: now).view().cards}
    assert cards["deployments"].change_type == ChangeType.FAVORABLE
    for key in ("failures", "cfr", "mtr"):
        assert cards[key].change_type == ChangeType.UNFAVORABLE, key
    assert cards["mtr"].display_value == "80.0h"
