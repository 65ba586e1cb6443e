from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple


class ViewType(str, Enum):
    # PR metrics compound chart
    DISTRIBUTION = "distribution"
    STATUS = "status"
    SIZE = "size"
    LOC = "loc"
    # Deployment metrics compound chart
    DEPLOYMENT_COUNT = "count"
    DEPLOYMENT_FOCUS = "focus"
    # Single-view widgets
    CYCLE_TIME = "cycle_time"
    TEAM_GOALS = "team_goals"
    PR_SIZE_GOALS = "pr_size_goals"
    PR_REVIEW_GOALS = "pr_review_goals"
    PR_REVIEW_TIME_GOALS = "pr_review_time_goals"
    PR_PICKUP_GOALS = "pr_pickup_goals"
    PR_MERGE_TIME_GOALS = "pr_merge_time_goals"
    HIGH_RISK_GOALS = "high_risk_goals"


class ChartShape(str, Enum):
    AREA = "area"
    BAR = "bar"
    STACKED_BAR = "stacked-bar"
    SANKEY = "sankey"
    CALENDAR = "calendar"


class Polarity(str, Enum):
    HIGHER_IS_BETTER = "higher_is_better"
    LOWER_IS_BETTER = "lower_is_better"


class Unit(str, Enum):
    COUNT = "count"
    PERCENT = "percent"
    HOURS = "hours"
    MINUTES = "minutes"
    LOC = "loc"
    RATIO = "ratio"


class Aggregation(str, Enum):
    LATEST = "latest"
    TOTAL = "total"


@dataclass(frozen=True)
class Tolerances:
    """Neutral bands around a target, expressed as multipliers of the target."""

    lower_is_better: float = 1.5
    higher_is_better: float = 0.9

    def for_polarity(self, polarity: Polarity) -> float:
        if polarity == Polarity.LOWER_IS_BETTER:
            return self.lower_is_better
        return self.higher_is_better


STANDARD_TOLERANCES = Tolerances()
# Size goals tolerate only a 10% overshoot on lower-is-better metrics.
SIZE_TOLERANCES = Tolerances(lower_is_better=1.1)


@dataclass(frozen=True)
class MetricConfig:
    key: str
    label: str
    target: Optional[float] = None
    color: Optional[str] = None
    description: Optional[str] = None
    polarity: Polarity = Polarity.HIGHER_IS_BETTER
    unit: Unit = Unit.COUNT
    tolerance: Optional[float] = None

    @property
    def has_target(self) -> bool:
        return self.target is not None


@dataclass(frozen=True)
class ViewConfig:
    view_type: ViewType
    label: str
    metrics: Tuple[MetricConfig, ...]
    shape: ChartShape = ChartShape.AREA
    card_metrics: Optional[Tuple[MetricConfig, ...]] = None
    tolerances: Tolerances = field(default_factory=Tolerances)
    aggregation: Aggregation = Aggregation.LATEST
    description: str = ""
    x_field: str = "week"

    def __post_init__(self) -> None:
        object.__setattr__(self, "metrics", tuple(self.metrics))
        if self.card_metrics is not None:
            object.__setattr__(self, "card_metrics", tuple(self.card_metrics))
        if not self.metrics:
            raise ValueError(f"view {self.view_type.value!r} has no chart metrics")
        _check_unique(self.view_type, self.metrics)
        _check_unique(self.view_type, self.cards)

    @property
    def cards(self) -> Tuple[MetricConfig, ...]:
        return self.card_metrics if self.card_metrics is not None else self.metrics

    @property
    def metric_keys(self) -> Tuple[str, ...]:
        return tuple(m.key for m in self.metrics)

    @property
    def card_keys(self) -> Tuple[str, ...]:
        return tuple(m.key for m in self.cards)

    def metric(self, key: str) -> Optional[MetricConfig]:
        for m in self.metrics:
            if m.key == key:
                return m
        return None

    def card_metric(self, key: str) -> Optional[MetricConfig]:
        for m in self.cards:
            if m.key == key:
                return m
        return None


def _check_unique(view_type: ViewType, metrics: Iterable[MetricConfig]) -> None:
    seen = set()
    for m in metrics:
        if m.key in seen:
            raise ValueError(f"duplicate metric key {m.key!r} in view {view_type.value!r}")
        seen.add(m.key)


class ViewRegistry(Mapping[ViewType, ViewConfig]):
    """Ordered, read-only set of views that one widget can switch between."""

    def __init__(self, views: Iterable[ViewConfig], *, default_view: Optional[ViewType] = None) -> None:
        self._views: Dict[ViewType, ViewConfig] = {}
        for view in views:
            if view.view_type in self._views:
                raise ValueError(f"view {view.view_type.value!r} registered twice")
            self._views[view.view_type] = view
        if not self._views:
            raise ValueError("a registry needs at least one view")
        if default_view is not None and default_view not in self._views:
            raise ValueError(f"default view {default_view.value!r} is not registered")
        self.default_view = default_view if default_view is not None else next(iter(self._views))

    def __getitem__(self, view_type: ViewType) -> ViewConfig:
        return self._views[view_type]

    def __iter__(self) -> Iterator[ViewType]:
        return iter(self._views)

    def __len__(self) -> int:
        return len(self._views)

    def __repr__(self) -> str:
        return f"ViewRegistry({[v.value for v in self._views]})"

    @property
    def view_types(self) -> List[ViewType]:
        return list(self._views)

    def resolve(self, value: object) -> Optional[ViewType]:
        """Map a raw view key onto a registered ViewType, or None."""
        try:
            view_type = value if isinstance(value, ViewType) else ViewType(str(value))
        except ValueError:
            return None
        return view_type if view_type in self._views else None
