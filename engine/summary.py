from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from engine.formatting import format_value
from engine.registry import Aggregation, MetricConfig, Polarity, Tolerances, ViewConfig


class ChangeType(str, Enum):
    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class SummaryCard:
    key: str
    title: str
    value: float
    display_value: str
    change: float
    change_type: ChangeType
    description: Optional[str] = None


def _numeric(record: Mapping[str, Any], key: str) -> float:
    try:
        value = float(record.get(key))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return value


def latest_value(series: Sequence[Mapping[str, Any]], key: str) -> float:
    if not series:
        return 0.0
    return _numeric(series[-1], key)


def previous_value(series: Sequence[Mapping[str, Any]], key: str) -> Optional[float]:
    if len(series) < 2:
        return None
    return _numeric(series[-2], key)


def total_value(series: Iterable[Mapping[str, Any]], key: str) -> float:
    return float(sum(_numeric(record, key) for record in series))


def change_percent(latest: float, previous: Optional[float]) -> float:
    """Percent change from ``previous`` to ``latest``.

    Growth from zero has no finite percentage and is reported as ``+inf``;
    zero to zero is no change.
    """
    if previous is None:
        return 0.0
    if previous == 0:
        return 0.0 if latest == 0 else math.inf
    return (latest - previous) / previous * 100


def classify_change(
    metric: MetricConfig,
    latest: float,
    change: float,
    tolerances: Optional[Tolerances] = None,
) -> ChangeType:
    if metric.target is None:
        if change == 0:
            return ChangeType.NEUTRAL
        if metric.polarity == Polarity.LOWER_IS_BETTER:
            improved = change < 0
        else:
            improved = change > 0
        return ChangeType.FAVORABLE if improved else ChangeType.UNFAVORABLE

    target = float(metric.target)
    band = metric.tolerance
    if band is None:
        band = (tolerances or Tolerances()).for_polarity(metric.polarity)

    if metric.polarity == Polarity.LOWER_IS_BETTER:
        if latest <= target:
            return ChangeType.FAVORABLE
        if latest <= target * band:
            return ChangeType.NEUTRAL
        return ChangeType.UNFAVORABLE

    if latest >= target:
        return ChangeType.FAVORABLE
    if latest >= target * band:
        return ChangeType.NEUTRAL
    return ChangeType.UNFAVORABLE


def summarize_metric(series: Sequence[Mapping[str, Any]], metric: MetricConfig, view: ViewConfig) -> SummaryCard:
    latest = latest_value(series, metric.key)
    change = change_percent(latest, previous_value(series, metric.key))
    shown = total_value(series, metric.key) if view.aggregation == Aggregation.TOTAL else latest
    return SummaryCard(
        key=metric.key,
        title=metric.label,
        value=shown,
        display_value=format_value(shown, metric.unit),
        change=change,
        change_type=classify_change(metric, latest, change, view.tolerances),
        description=metric.description,
    )


def derive_summary_cards(
    series: Sequence[Mapping[str, Any]],
    view: ViewConfig,
    selected_keys: Iterable[str],
) -> List[SummaryCard]:
    """Cards for the selected keys, in the view's declared order."""
    selected = set(selected_keys)
    return [summarize_metric(series, m, view) for m in view.cards if m.key in selected]
