"""Mock data source: 52 weekly records per view, ending on the anchor day.

Stands in for a real metrics API. Values are seeded so a given
``(widget, anchor day, seed)`` always yields the same records.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd

from engine.registry import ViewType
from engine.timewindow import to_timestamp
from engine.widgets import Widget

WEEKS = 52
DEFAULT_SEED = 7


class Drift(NamedTuple):
    """Value moving from ``start`` to ``end`` over the year with uniform noise, clipped."""

    start: float
    end: float
    noise: float
    low: float
    high: float
    integer: bool = False


def _flat(low: float, high: float) -> Drift:
    return Drift(start=(low + high) / 2, end=(low + high) / 2, noise=high - low, low=low, high=high, integer=True)


def _deployment_fields(row: Dict[str, Any]) -> None:
    deployments = row["deployments"]
    failures = min(row["failures"], int(deployments * 0.3))
    row["failures"] = failures
    row["successful"] = deployments - failures
    row["cfr"] = failures / deployments * 100 if deployments else 0.0


def _loc_fields(row: Dict[str, Any]) -> None:
    row["loc"] = row["additions"] + row["deletions"]
    row["netChange"] = row["additions"] - row["deletions"]


_DEPLOYMENT_COUNTS = {
    "deployments": _flat(10, 29),
    "failures": _flat(0, 8),
    "mtr": _flat(30, 149),
}

SERIES: Dict[ViewType, Dict[str, Drift]] = {
    ViewType.DISTRIBUTION: {
        "feature": _flat(2, 9),
        "enhancement": _flat(1, 5),
        "bugfix": _flat(1, 6),
        "refactor": _flat(1, 4),
        "chore": _flat(1, 4),
        "security": _flat(1, 2),
        "documentation": _flat(1, 3),
        "test": _flat(1, 3),
    },
    ViewType.STATUS: {
        "open": _flat(1, 5),
        "inReview": _flat(1, 4),
        "merged": _flat(2, 9),
        "closed": _flat(1, 3),
        "draft": _flat(1, 2),
    },
    ViewType.SIZE: {
        "xs": _flat(5, 24),
        "s": _flat(10, 39),
        "m": _flat(5, 19),
        "l": _flat(2, 9),
        "xl": _flat(1, 4),
        "xxl": _flat(0, 1),
    },
    ViewType.LOC: {
        "additions": _flat(1000, 5999),
        "deletions": _flat(500, 2499),
    },
    ViewType.DEPLOYMENT_COUNT: dict(_DEPLOYMENT_COUNTS),
    ViewType.DEPLOYMENT_FOCUS: {
        **_DEPLOYMENT_COUNTS,
        "features": _flat(2, 9),
        "security": _flat(1, 4),
        "chores": _flat(2, 7),
        "documentation": _flat(1, 3),
        "bugfixes": _flat(1, 5),
    },
    ViewType.CYCLE_TIME: {
        "codingTime": Drift(4.5, 4.5, 5, 2, 7),
        "pickupTime": Drift(8, 8, 8, 4, 12),
        "reviewTime": Drift(11, 11, 10, 6, 16),
        "mergeTime": Drift(1.1, 1.1, 2, 0.1, 2.1),
    },
    ViewType.TEAM_GOALS: {
        "productivity": Drift(70, 85, 10, 50, 100),
        "quality": Drift(75, 90, 10, 50, 100),
        "learning": Drift(65, 80, 10, 50, 100),
        "teamwork": Drift(70, 85, 10, 50, 100),
    },
    ViewType.PR_SIZE_GOALS: {
        "smallPRPercentage": Drift(60, 80, 10, 40, 95),
        "avgPRSize": Drift(300, 150, 50, 100, 500),
        "reviewTime": Drift(48, 24, 10, 12, 72),
        "mergeSuccess": Drift(85, 95, 10, 75, 100),
    },
    ViewType.PR_REVIEW_GOALS: {
        "reviewCoverage": Drift(90, 100, 10, 80, 100),
        "reviewerCount": Drift(1.5, 2, 1, 1, 3),
        "timeToFirstReview": Drift(6, 4, 2, 2, 8),
        "approvalRate": Drift(80, 90, 10, 70, 100),
    },
    ViewType.PR_REVIEW_TIME_GOALS: {
        "reviewCompletionTime": Drift(48, 24, 10, 12, 72),
        "staleReviewRate": Drift(15, 5, 5, 2, 25),
        "iterationCount": Drift(4, 2, 1, 1, 6),
        "firstPassRate": Drift(50, 70, 10, 30, 90),
    },
    ViewType.PR_PICKUP_GOALS: {
        "pickupTime": Drift(24, 12, 5, 6, 36),
        "staleRate": Drift(15, 5, 5, 2, 25),
        "assigneePickupRate": Drift(75, 90, 10, 60, 100),
        "teamResponseTime": Drift(8, 4, 2, 2, 12),
    },
    ViewType.PR_MERGE_TIME_GOALS: {
        "mergeTime": Drift(96, 48, 10, 24, 120),
        "staleMergeRate": Drift(15, 5, 5, 2, 25),
        "mergeSuccessRate": Drift(85, 95, 10, 75, 100),
        "conflictRate": Drift(20, 10, 5, 5, 30),
    },
    ViewType.HIGH_RISK_GOALS: {
        "highRiskRate": Drift(20, 10, 5, 5, 25),
        "criticalPathChanges": Drift(12, 5, 5, 2, 15),
        "securityImpact": Drift(8, 3, 5, 1, 10),
        "multiServiceChanges": Drift(25, 15, 5, 5, 30),
    },
}

POST_PROCESS: Dict[ViewType, Callable[[Dict[str, Any]], None]] = {
    ViewType.DEPLOYMENT_COUNT: _deployment_fields,
    ViewType.DEPLOYMENT_FOCUS: _deployment_fields,
    ViewType.LOC: _loc_fields,
}


def weekly_series(
    view_type: ViewType,
    anchor: pd.Timestamp,
    rng: np.random.Generator,
    *,
    weeks: int = WEEKS,
) -> Tuple[Dict[str, Any], ...]:
    drifts = SERIES.get(view_type, {})
    rows: List[Dict[str, Any]] = []
    for i in range(weeks - 1, -1, -1):
        date = anchor - pd.Timedelta(days=7 * i)
        week_number = int(date.isocalendar()[1])
        progress = (weeks - i) / weeks
        row: Dict[str, Any] = {
            "date": date.to_pydatetime(),
            "week": f"W{week_number:02d}",
            "tooltipLabel": f"Week {week_number}, {date.year}",
        }
        for key, d in drifts.items():
            value = d.start + (d.end - d.start) * progress + d.noise * (rng.random() - 0.5)
            value = float(np.clip(value, d.low, d.high))
            row[key] = int(round(value)) if d.integer else round(value, 2)
        hook = POST_PROCESS.get(view_type)
        if hook is not None:
            hook(row)
        rows.append(row)
    return tuple(rows)


@lru_cache(maxsize=32)
def _generate_cached(widget_key: str, view_types: Tuple[ViewType, ...], anchor_iso: str, seed: int) -> Dict[ViewType, Tuple[Dict[str, Any], ...]]:
    anchor = pd.Timestamp(anchor_iso)
    rng = np.random.default_rng(seed)
    return {vt: weekly_series(vt, anchor, rng) for vt in view_types}


def load_widget_data(
    widget: Widget,
    now: Optional[object] = None,
    *,
    seed: int = DEFAULT_SEED,
) -> Dict[ViewType, Tuple[Dict[str, Any], ...]]:
    """Records for every view of ``widget``, the newest one dated on ``now``'s day.

    Rows are copied out of the cache so callers never share them.
    """
    anchor = to_timestamp(now) if now is not None else None
    anchor = (anchor or pd.Timestamp.now()).normalize()
    data = _generate_cached(widget.key, tuple(widget.registry.view_types), anchor.isoformat(), seed)
    return {vt: tuple(dict(row) for row in rows) for vt, rows in data.items()}
