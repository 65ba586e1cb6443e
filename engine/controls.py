from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from engine.registry import ViewRegistry
from engine.selection import SelectionState
from engine.timewindow import TIME_RANGE_LABELS, TimeRange


class Action(str, Enum):
    SET_TIME_RANGE = "set_time_range"
    SET_VIEW_TYPE = "set_view_type"
    TOGGLE_CHART_METRIC = "toggle_chart_metric"
    TOGGLE_CARD_METRIC = "toggle_card_metric"
    SET_CARD_SELECTION = "set_card_selection"
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"


@dataclass(frozen=True)
class Option:
    value: str
    label: str
    active: bool = False
    locked: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class ControlSurface:
    view_types: List[Option] = field(default_factory=list)
    chart_metrics: List[Option] = field(default_factory=list)
    card_metrics: List[Option] = field(default_factory=list)
    time_ranges: List[Option] = field(default_factory=list)

    @property
    def show_view_type_selector(self) -> bool:
        return len(self.view_types) > 1


def build_controls(registry: ViewRegistry, selection: SelectionState, time_range: TimeRange) -> ControlSurface:
    """Describe the control panel for the active view.

    A chart metric is ``locked`` when it is the only one left selected, since
    unticking it would leave the chart empty.
    """
    view = registry[selection.active_view]
    charted = selection.chart_selection
    carded = selection.card_selection
    return ControlSurface(
        view_types=[
            Option(value=vt.value, label=registry[vt].label, active=vt == selection.active_view)
            for vt in registry
        ],
        chart_metrics=[
            Option(
                value=m.key,
                label=m.label,
                active=m.key in charted,
                locked=charted == (m.key,),
                description=m.description,
            )
            for m in view.metrics
        ],
        card_metrics=[
            Option(value=m.key, label=m.label, active=m.key in carded, description=m.description)
            for m in view.cards
        ],
        time_ranges=[
            Option(value=tr.value, label=TIME_RANGE_LABELS[tr], active=tr == time_range)
            for tr in TimeRange
        ],
    )
