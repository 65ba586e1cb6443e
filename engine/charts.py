from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import altair as alt
import pandas as pd

from engine.colors import palette_color
from engine.registry import ChartShape, MetricConfig

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def build_chart(
    shape: ChartShape,
    series: Sequence[Mapping[str, Any]],
    metrics: List[MetricConfig],
    x_field: str,
    *,
    height: int = 320,
) -> Optional[alt.Chart]:
    """Area / bar / stacked-bar chart of ``metrics`` over ``series``.

    Sankey and calendar shapes are drawn by dedicated renderers; None here.
    """
    if shape not in (ChartShape.AREA, ChartShape.BAR, ChartShape.STACKED_BAR) or not metrics:
        return None

    keys = [m.key for m in metrics]
    rows = [{x_field: r.get(x_field), **{k: r.get(k) for k in keys}} for r in series]
    wide = pd.DataFrame(rows, columns=[x_field, *keys])
    wide["_order"] = range(len(wide))
    long_df = wide.melt(id_vars=[x_field, "_order"], value_vars=keys, var_name="metric", value_name="value")
    labels = {m.key: m.label for m in metrics}
    long_df["label"] = long_df["metric"].map(labels)

    colors = alt.Scale(
        domain=[m.label for m in metrics],
        range=[m.color or palette_color(i) for i, m in enumerate(metrics)],
    )
    x = alt.X(f"{x_field}:O", title=None, sort=alt.EncodingSortField(field="_order", op="min"), axis=alt.Axis(labelAngle=0, grid=False))
    y = alt.Y("value:Q", title=None, stack="zero" if shape != ChartShape.BAR else None, axis=alt.Axis(gridDash=[3, 3]))
    color = alt.Color("label:N", title=None, scale=colors, sort=[m.label for m in metrics])
    tooltip = [alt.Tooltip(f"{x_field}:O"), alt.Tooltip("label:N", title="Metric"), alt.Tooltip("value:Q", format=",.2f")]

    base = alt.Chart(long_df)
    if shape == ChartShape.AREA:
        mark = base.mark_area(line={"strokeWidth": 1}, opacity=0.6, interpolate="linear")
    else:
        mark = base.mark_bar()
    encoded = mark.encode(x=x, y=y, color=color, tooltip=tooltip)
    if shape == ChartShape.BAR:
        encoded = encoded.encode(xOffset="label:N")
    return encoded.properties(height=height)


def build_chart_spec(
    shape: ChartShape,
    series: Sequence[Mapping[str, Any]],
    metrics: List[MetricConfig],
    x_field: str,
) -> Optional[Dict[str, Any]]:
    chart = build_chart(shape, series, metrics, x_field)
    return to_vega_spec(chart) if chart is not None else None
