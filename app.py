import logging
from contextlib import contextmanager
from typing import Optional

import pandas as pd
import streamlit as st

from engine.charts import build_chart
from engine.controls import Action
from engine.data import load_widget_data
from engine.formatting import format_change
from engine.registry import ChartShape
from engine.state import DashboardEngine, DashboardView
from engine.summary import ChangeType, SummaryCard
from engine.timewindow import TIME_RANGE_LABELS, TimeRange
from engine.widgets import Widget, get_widget, list_widgets

logger = logging.getLogger(__name__)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 10px;padding: 12px 16px;margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-meta {font-size: 0.85rem;color: #6b7280;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, meta: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-meta">{meta or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_view_summary(view: DashboardView) -> str:
    chips = [
        f"Range: {TIME_RANGE_LABELS[view.time_range]}",
        f"From: {view.window_start:%b %d, %Y}",
        f"Metrics: {len(view.chart_metrics)}",
        f"Cards: {len(view.cards)}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    top = st.container()
    c1, c2 = top.columns([7, 3])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        btn_cols = st.columns(2)
        if btn_cols[0].button("Refresh"):
            st.rerun()
        if export_df is not None and not export_df.empty:
            btn_cols[1].download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{summary_html}</div>", unsafe_allow_html=True)


# ---------- engine wiring ----------
def get_engine(widget: Widget) -> DashboardEngine:
    engines = st.session_state.setdefault("_engines", {})
    engine = engines.get(widget.key)
    if engine is None:
        engine = DashboardEngine(widget)
        engines[widget.key] = engine
    now = pd.Timestamp.now()
    engine.refresh(load_widget_data(widget, now))
    return engine


def dispatch(widget_key: str, action: Action, value: object = None):
    st.session_state["_engines"][widget_key].dispatch(action, value)


def _delta_color(card_: SummaryCard) -> str:
    if card_.change_type == ChangeType.NEUTRAL:
        return "off"
    # st.metric colors by sign; flip it when a fall is the good direction
    rising = card_.change >= 0
    favorable = card_.change_type == ChangeType.FAVORABLE
    return "normal" if rising == favorable else "inverse"


def render_controls(engine: DashboardEngine, view: DashboardView):
    controls = view.controls
    key = engine.widget.key
    cols = st.columns([2, 2, 3])

    if controls.show_view_type_selector:
        labels = {o.value: o.label for o in controls.view_types}
        values = list(labels)
        active = next(o.value for o in controls.view_types if o.active)
        picked = cols[0].selectbox(
            "View",
            options=values,
            index=values.index(active),
            format_func=labels.get,
            key=f"{key}-view",
        )
        if picked != active:
            engine.set_view_type(picked)
            st.rerun()

    ranges = [tr.value for tr in TimeRange]
    picked_range = cols[1].selectbox(
        "Time range",
        options=ranges,
        index=ranges.index(view.time_range.value),
        format_func=lambda v: TIME_RANGE_LABELS[TimeRange(v)],
        key=f"{key}-range",
    )
    if picked_range != view.time_range.value:
        engine.set_time_range(picked_range)
        st.rerun()

    card_labels = {o.value: o.label for o in controls.card_metrics}
    chosen = [o.value for o in controls.card_metrics if o.active]
    picked_cards = cols[2].multiselect(
        "Summary cards",
        options=list(card_labels),
        default=chosen,
        format_func=card_labels.get,
        key=f"{key}-{view.view_type.value}-cards",
    )
    if picked_cards != chosen:
        engine.set_card_selection(picked_cards)
        st.rerun()

    st.caption("Chart metrics")
    metric_cols = st.columns(max(len(controls.chart_metrics), 1))
    for col, option in zip(metric_cols, controls.chart_metrics):
        col.checkbox(
            option.label,
            value=option.active,
            disabled=option.locked,
            help=option.description,
            key=f"{key}-{view.view_type.value}-chart-{option.value}",
            on_change=dispatch,
            args=(key, Action.TOGGLE_CHART_METRIC, option.value),
        )


def render_cards(engine: DashboardEngine, view: DashboardView):
    page = view.page
    if not page.total_items:
        st.info("No summary cards selected.")
        return
    cols = st.columns(page.page_size)
    for col, item in zip(cols, page.items):
        col.metric(
            item.title,
            item.display_value,
            delta=format_change(item.change),
            delta_color=_delta_color(item),
            help=item.description,
        )
    if page.total_pages > 1:
        key = engine.widget.key
        prev_col, label_col, next_col = st.columns([1, 6, 1])
        prev_col.button(
            "‹",
            disabled=not page.can_go_previous,
            key=f"{key}-prev",
            on_click=dispatch,
            args=(key, Action.PREVIOUS_PAGE),
        )
        label_col.caption(f"Page {page.page_index + 1} of {page.total_pages}")
        next_col.button(
            "›",
            disabled=not page.can_go_next,
            key=f"{key}-next",
            on_click=dispatch,
            args=(key, Action.NEXT_PAGE),
        )


def render_chart(view: DashboardView):
    if not view.chart_series:
        st.info("No data in the selected time range.")
        return
    chart = build_chart(view.shape, view.chart_series, view.chart_metrics, view.x_field)
    if chart is None:
        # sankey and calendar views fall back to a plain line of the selected keys
        keys = [m.key for m in view.chart_metrics]
        st.line_chart(pd.DataFrame(list(view.chart_series)).set_index(view.x_field)[keys])
        return
    st.altair_chart(chart, use_container_width=True)


def render_widget(widget: Widget):
    engine = get_engine(widget)
    view = engine.view()
    table = pd.DataFrame(list(view.table_rows))
    render_page_header(
        widget.title,
        f"Dashboard / {widget.title}",
        format_view_summary(view),
        export_df=table,
        export_name=f"{widget.key}-{view.view_type.value}-{view.time_range.value}.csv",
    )
    if view.description:
        st.caption(view.description)

    with card("Controls"):
        render_controls(engine, view)
    with card("Summary", meta=f"{len(view.cards)} metrics"):
        render_cards(engine, view)
    shape_label = "" if view.shape == ChartShape.AREA else view.shape.value
    with card("Trend", meta=shape_label):
        render_chart(view)
    with card("Details", meta=f"{len(table)} rows"):
        if table.empty:
            st.info("No rows to show.")
        else:
            st.dataframe(table, hide_index=True, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Engineering Metrics Dashboard", layout="wide")
inject_base_styles()
st.title("Engineering Metrics Dashboard")
st.caption("Pull request, deployment and goal tracking across teams.")

widgets = list_widgets()
with st.sidebar:
    st.markdown("### Navigate")
    titles = {w.key: w.title for w in widgets}
    nav_choice = st.radio("Navigate", list(titles), format_func=titles.get, index=0)

selected = get_widget(nav_choice)
if selected is None:
    st.error(f"Unknown widget: {nav_choice}")
    st.stop()

try:
    render_widget(selected)
except Exception as exc:
    logger.exception("render_widget failed for %s", nav_choice)
    st.error(f"Could not render {selected.title}: {exc}")
