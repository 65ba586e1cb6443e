"""Dashboard state: one immutable value per widget plus the reducers that move it.

Every user action is a pure function ``(state, widget, arg) -> state``;
everything shown on screen comes from ``derive_view`` and is recomputed on
each call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from engine import pagination, selection
from engine.controls import Action, ControlSurface, build_controls
from engine.pagination import Page, PageCursor
from engine.registry import ChartShape, MetricConfig, ViewType
from engine.selection import SelectionState, default_selection
from engine.summary import SummaryCard, derive_summary_cards
from engine.timewindow import TimeRange, filter_series, parse_time_range, to_timestamp, window_start
from engine.widgets import Widget


logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
Records = Mapping[ViewType, Tuple[Record, ...]]


@dataclass(frozen=True)
class DashboardState:
    time_range: TimeRange
    selection: SelectionState
    cursor: PageCursor = field(default_factory=PageCursor)

    @property
    def view_type(self) -> ViewType:
        return self.selection.active_view


@dataclass(frozen=True)
class DashboardView:
    widget_key: str
    title: str
    description: str
    view_type: ViewType
    shape: ChartShape
    x_field: str
    time_range: TimeRange
    window_start: pd.Timestamp
    now: pd.Timestamp
    chart_series: List[Record]
    table_rows: List[Record]
    chart_metrics: List[MetricConfig]
    cards: List[SummaryCard]
    page: Page[SummaryCard]
    controls: ControlSurface


def initial_state(widget: Widget, *, time_range: Optional[TimeRange] = None) -> DashboardState:
    return DashboardState(
        time_range=time_range or widget.default_time_range,
        selection=default_selection(widget.registry),
        cursor=PageCursor(page_index=0, page_size=widget.page_size),
    )


def _card_count(state: DashboardState, widget: Widget) -> int:
    chosen = set(state.selection.card_selection)
    return sum(1 for m in widget.registry[state.view_type].cards if m.key in chosen)


def _with_selection(state: DashboardState, new_selection: SelectionState) -> DashboardState:
    if new_selection == state.selection:
        return state
    return replace(state, selection=new_selection, cursor=pagination.first_page(state.cursor))


def set_time_range(state: DashboardState, widget: Widget, value: object) -> DashboardState:
    token = parse_time_range(value, default=state.time_range)
    if token == state.time_range:
        return state
    return replace(state, time_range=token, cursor=pagination.first_page(state.cursor))


def set_view_type(state: DashboardState, widget: Widget, value: object) -> DashboardState:
    return _with_selection(state, selection.switch_view(state.selection, value, widget.registry))


def toggle_chart_metric(state: DashboardState, widget: Widget, key: object) -> DashboardState:
    return _with_selection(state, selection.toggle_chart_metric(state.selection, str(key), widget.registry))


def toggle_card_metric(state: DashboardState, widget: Widget, key: object) -> DashboardState:
    return _with_selection(state, selection.toggle_card_metric(state.selection, str(key), widget.registry))


def set_card_selection(state: DashboardState, widget: Widget, keys: object) -> DashboardState:
    if isinstance(keys, str) or not isinstance(keys, Iterable):
        keys = [keys] if keys else []
    wanted = [str(k) for k in keys]
    return _with_selection(state, selection.set_card_selection(state.selection, wanted, widget.registry))


def next_page(state: DashboardState, widget: Widget, _: object = None) -> DashboardState:
    cursor = pagination.next_page(state.cursor, _card_count(state, widget))
    return state if cursor == state.cursor else replace(state, cursor=cursor)


def previous_page(state: DashboardState, widget: Widget, _: object = None) -> DashboardState:
    cursor = pagination.previous_page(state.cursor)
    return state if cursor == state.cursor else replace(state, cursor=cursor)


REDUCERS: Dict[Action, Callable[[DashboardState, Widget, object], DashboardState]] = {
    Action.SET_TIME_RANGE: set_time_range,
    Action.SET_VIEW_TYPE: set_view_type,
    Action.TOGGLE_CHART_METRIC: toggle_chart_metric,
    Action.TOGGLE_CARD_METRIC: toggle_card_metric,
    Action.SET_CARD_SELECTION: set_card_selection,
    Action.NEXT_PAGE: next_page,
    Action.PREVIOUS_PAGE: previous_page,
}


def apply_action(state: DashboardState, widget: Widget, action: Action, value: object = None) -> DashboardState:
    return REDUCERS[Action(action)](state, widget, value)


def derive_view(widget: Widget, state: DashboardState, records: Records, now: object) -> DashboardView:
    """Filter, summarize and paginate for the active view at instant ``now``."""
    now_ts = to_timestamp(now)
    if now_ts is None:
        raise ValueError(f"now is not a valid instant: {now!r}")
    view = widget.registry[state.view_type]
    start = window_start(now_ts, state.time_range)

    series = filter_series(records.get(view.view_type, ()), start, now_ts, date_field=widget.date_field)
    charted = set(state.selection.chart_selection)
    cards = derive_summary_cards(series, view, state.selection.card_selection)

    return DashboardView(
        widget_key=widget.key,
        title=widget.title,
        description=view.description,
        view_type=view.view_type,
        shape=view.shape,
        x_field=view.x_field,
        time_range=state.time_range,
        window_start=start,
        now=now_ts,
        chart_series=series,
        table_rows=series[::-1],
        chart_metrics=[m for m in view.metrics if m.key in charted],
        cards=cards,
        page=pagination.build_page(cards, state.cursor),
        controls=build_controls(widget.registry, state.selection, state.time_range),
    )


def freeze_records(widget: Widget, records: Any) -> Records:
    """Accept a per-view mapping or, for any widget, one sequence for the default view."""
    if records is None:
        return {}
    if isinstance(records, Mapping):
        frozen: Dict[ViewType, Tuple[Record, ...]] = {}
        for raw_key, rows in records.items():
            view_type = widget.registry.resolve(raw_key)
            if view_type is None:
                logger.debug("dropping records for unknown view %r on %s", raw_key, widget.key)
                continue
            frozen[view_type] = tuple(rows or ())
        return frozen
    return {widget.registry.default_view: tuple(records)}


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _keys_for(raw: Any, allowed: Sequence[str]) -> List[str]:
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        return []
    out: List[str] = []
    for key in raw:
        key = str(key)
        if key in allowed and key not in out:
            out.append(key)
    return out


def normalize_state(raw: Optional[Mapping[str, Any]], widget: Widget) -> DashboardState:
    """Build a valid state from untrusted input, falling back instead of failing."""
    raw = raw or {}
    registry = widget.registry
    base = default_selection(registry)

    chart = dict(base.chart)
    for raw_view, keys in _as_mapping(raw.get("chart_selection")).items():
        view_type = registry.resolve(raw_view)
        if view_type is None:
            continue
        picked = _keys_for(keys, registry[view_type].metric_keys)
        if picked:
            chart[view_type] = tuple(picked)

    cards = dict(base.cards)
    for raw_view, keys in _as_mapping(raw.get("card_selection")).items():
        view_type = registry.resolve(raw_view)
        if view_type is None:
            continue
        cards[view_type] = tuple(_keys_for(keys, registry[view_type].card_keys))

    active = registry.resolve(raw.get("view_type")) or registry.default_view
    picked_selection = SelectionState(active_view=active, chart=chart, cards=cards)

    page_size = raw.get("page_size", widget.page_size)
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = widget.page_size
    page_index = raw.get("page_index", 0)
    try:
        page_index = int(page_index)
    except (TypeError, ValueError):
        page_index = 0

    state = DashboardState(
        time_range=parse_time_range(raw.get("time_range"), default=widget.default_time_range),
        selection=picked_selection,
        cursor=PageCursor(page_index=page_index, page_size=page_size),
    )
    return replace(state, cursor=pagination.reconcile(state.cursor, _card_count(state, widget)))


def state_to_dict(state: DashboardState) -> Dict[str, Any]:
    return {
        "view_type": state.view_type.value,
        "time_range": state.time_range.value,
        "chart_selection": {vt.value: list(keys) for vt, keys in state.selection.chart.items()},
        "card_selection": {vt.value: list(keys) for vt, keys in state.selection.cards.items()},
        "page_index": state.cursor.page_index,
        "page_size": state.cursor.page_size,
    }


class DashboardEngine:
    """One widget's engine instance: current state, current records and a clock."""

    def __init__(
        self,
        widget: Widget,
        records: Any = None,
        *,
        clock: Optional[Callable[[], object]] = None,
        time_range: Optional[TimeRange] = None,
    ) -> None:
        self.widget = widget
        self.clock = clock or pd.Timestamp.now
        self.state = initial_state(widget, time_range=time_range)
        self.records: Records = freeze_records(widget, records)

    def dispatch(self, action: Action, value: object = None) -> DashboardState:
        self.state = apply_action(self.state, self.widget, action, value)
        return self.state

    def set_time_range(self, token: object) -> DashboardState:
        return self.dispatch(Action.SET_TIME_RANGE, token)

    def set_view_type(self, view_type: object) -> DashboardState:
        return self.dispatch(Action.SET_VIEW_TYPE, view_type)

    def toggle_chart_metric(self, key: str) -> DashboardState:
        return self.dispatch(Action.TOGGLE_CHART_METRIC, key)

    def toggle_card_metric(self, key: str) -> DashboardState:
        return self.dispatch(Action.TOGGLE_CARD_METRIC, key)

    def set_card_selection(self, keys: Iterable[str]) -> DashboardState:
        return self.dispatch(Action.SET_CARD_SELECTION, list(keys))

    def next_page(self) -> DashboardState:
        return self.dispatch(Action.NEXT_PAGE)

    def previous_page(self) -> DashboardState:
        return self.dispatch(Action.PREVIOUS_PAGE)

    def refresh(self, records: Any) -> None:
        self.records = freeze_records(self.widget, records)

    def view(self, now: object = None) -> DashboardView:
        return derive_view(self.widget, self.state, self.records, now if now is not None else self.clock())
