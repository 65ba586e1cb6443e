from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from engine.charts import build_chart_spec
from engine.formatting import format_change
from engine.state import DashboardState, DashboardView, Records, derive_view, state_to_dict
from engine.widgets import Widget


def _card_payload(card: Any) -> Dict[str, Any]:
    out = asdict(card)
    out["change_display"] = format_change(card.change)
    return out


def view_payload(view: DashboardView, state: DashboardState) -> Dict[str, Any]:
    page = view.page
    return {
        "state": state_to_dict(state),
        "widget": {"key": view.widget_key, "title": view.title, "description": view.description},
        "view": {
            "view_type": view.view_type.value,
            "shape": view.shape.value,
            "x_field": view.x_field,
            "time_range": view.time_range.value,
            "window_start": view.window_start,
            "now": view.now,
        },
        "chart_metrics": [asdict(m) for m in view.chart_metrics],
        "cards": [_card_payload(c) for c in view.cards],
        "page": {
            "items": [_card_payload(c) for c in page.items],
            "page_index": page.page_index,
            "page_size": page.page_size,
            "total_pages": page.total_pages,
            "total_items": page.total_items,
            "can_go_next": page.can_go_next,
            "can_go_previous": page.can_go_previous,
        },
        "controls": {
            **asdict(view.controls),
            "show_view_type_selector": view.controls.show_view_type_selector,
        },
        "series": list(view.chart_series),
        "charts": {
            "main": build_chart_spec(view.shape, view.chart_series, view.chart_metrics, view.x_field),
        },
    }


def compute_dashboard(widget: Widget, state: DashboardState, records: Records, now: object) -> Dict[str, Any]:
    return view_payload(derive_view(widget, state, records, now), state)
