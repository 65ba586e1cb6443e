from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import (
    ActionRequest,
    DashboardStateModel,
    MetaTimeRangesResponse,
    MetaWidgetsResponse,
    TimeRangeOption,
    WidgetSummary,
)
from engine.controls import Action
from engine.data import load_widget_data
from engine.payload import compute_dashboard
from engine.state import apply_action, derive_view, normalize_state
from engine.timewindow import TIME_RANGE_LABELS, TimeRange
from engine.widgets import Widget, get_widget, list_widgets


app = FastAPI(title="Engineering Metrics Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects.

    Growth from zero is reported as the string ``"Infinity"`` so the sentinel
    survives strict JSON.
    """

    def _safe_float(value: object) -> float | str | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out):
            return None
        if math.isinf(out):
            return "Infinity" if out > 0 else "-Infinity"
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(status_code: int, message: str, kind: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "type": kind})


def _widget_or_404(widget_key: str) -> Widget | JSONResponse:
    widget = get_widget(widget_key)
    if widget is None:
        return _error(404, f"unknown widget {widget_key!r}", "NotFound")
    return widget


@app.get("/meta/widgets")
def meta_widgets():
    try:
        response = MetaWidgetsResponse(
            widgets=[
                WidgetSummary(
                    key=w.key,
                    title=w.title,
                    page_size=w.page_size,
                    default_time_range=w.default_time_range.value,
                    view_types=[vt.value for vt in w.registry.view_types],
                )
                for w in list_widgets()
            ]
        )
        return _json(response.model_dump())
    except Exception as exc:
        logger.exception("meta_widgets failed")
        return _error(500, str(exc), type(exc).__name__)


@app.get("/meta/time-ranges")
def meta_time_ranges():
    response = MetaTimeRangesResponse(
        time_ranges=[TimeRangeOption(value=tr.value, label=TIME_RANGE_LABELS[tr]) for tr in TimeRange]
    )
    return _json(response.model_dump())


@app.post("/widgets/{widget_key}/view")
def widget_view(widget_key: str, state: DashboardStateModel):
    widget = _widget_or_404(widget_key)
    if isinstance(widget, JSONResponse):
        return widget
    try:
        now = pd.Timestamp.now()
        s = normalize_state(state.model_dump(exclude_none=True), widget)
        return _json(compute_dashboard(widget, s, load_widget_data(widget, now), now))
    except Exception as exc:
        logger.exception("widget_view failed")
        return _error(500, str(exc), type(exc).__name__)


@app.post("/widgets/{widget_key}/actions/{action}")
def widget_action(widget_key: str, action: str, request: ActionRequest):
    widget = _widget_or_404(widget_key)
    if isinstance(widget, JSONResponse):
        return widget
    try:
        parsed = Action(action)
    except ValueError:
        return _error(400, f"unknown action {action!r}", "BadRequest")
    try:
        now = pd.Timestamp.now()
        s = normalize_state(request.state.model_dump(exclude_none=True), widget)
        s = apply_action(s, widget, parsed, request.value)
        return _json(compute_dashboard(widget, s, load_widget_data(widget, now), now))
    except Exception as exc:
        logger.exception("widget_action failed")
        return _error(500, str(exc), type(exc).__name__)


@app.post("/widgets/{widget_key}/export")
def export_widget(widget_key: str, state: DashboardStateModel):
    widget = _widget_or_404(widget_key)
    if isinstance(widget, JSONResponse):
        return widget
    try:
        now = pd.Timestamp.now()
        s = normalize_state(state.model_dump(exclude_none=True), widget)
        view = derive_view(widget, s, load_widget_data(widget, now), now)
    except Exception as exc:
        logger.exception("export_widget failed")
        return _error(500, str(exc), type(exc).__name__)

    export_df = pd.DataFrame(list(view.table_rows))
    filename = f"{widget.key}-{view.view_type.value}-{view.time_range.value}.csv"
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
