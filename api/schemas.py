from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DashboardStateModel(BaseModel):
    view_type: Optional[str] = None
    time_range: Optional[str] = None
    chart_selection: Dict[str, List[str]] = Field(default_factory=dict)
    card_selection: Dict[str, List[str]] = Field(default_factory=dict)
    page_index: int = 0
    page_size: Optional[int] = None


class ActionRequest(BaseModel):
    state: DashboardStateModel = Field(default_factory=DashboardStateModel)
    value: Optional[Any] = None


class TimeRangeOption(BaseModel):
    value: str
    label: str


class WidgetSummary(BaseModel):
    key: str
    title: str
    page_size: int
    default_time_range: str
    view_types: List[str]


class MetaWidgetsResponse(BaseModel):
    widgets: List[WidgetSummary]


class MetaTimeRangesResponse(BaseModel):
    time_ranges: List[TimeRangeOption]
