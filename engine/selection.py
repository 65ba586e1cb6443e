from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Mapping, Optional, Tuple

from engine.registry import ViewRegistry, ViewType


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionState:
    """Chart and card selections for every view of one widget.

    ``chart`` never holds an empty tuple for a registered view; ``cards`` may.
    """

    active_view: ViewType
    chart: Mapping[ViewType, Tuple[str, ...]] = field(default_factory=dict)
    cards: Mapping[ViewType, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def chart_selection(self) -> Tuple[str, ...]:
        return tuple(self.chart.get(self.active_view, ()))

    @property
    def card_selection(self) -> Tuple[str, ...]:
        return tuple(self.cards.get(self.active_view, ()))


def default_selection(registry: ViewRegistry, *, active_view: Optional[ViewType] = None) -> SelectionState:
    """Everything selected, for every view; built fresh for each widget instance."""
    chart: Dict[ViewType, Tuple[str, ...]] = {}
    cards: Dict[ViewType, Tuple[str, ...]] = {}
    for view_type, view in registry.items():
        chart[view_type] = view.metric_keys
        cards[view_type] = view.card_keys
    start = active_view if active_view in registry else registry.default_view
    return SelectionState(active_view=start, chart=chart, cards=cards)


def _flip(current: Tuple[str, ...], key: str) -> Tuple[str, ...]:
    if key in current:
        return tuple(k for k in current if k != key)
    return current + (key,)


def toggle_chart_metric(state: SelectionState, key: str, registry: ViewRegistry) -> SelectionState:
    view = registry[state.active_view]
    if view.metric(key) is None:
        logger.debug("ignoring unknown chart metric %r for view %s", key, state.active_view.value)
        return state
    current = state.chart_selection
    if current == (key,):
        return state
    chart = dict(state.chart)
    chart[state.active_view] = _flip(current, key)
    return replace(state, chart=chart)


def toggle_card_metric(state: SelectionState, key: str, registry: ViewRegistry) -> SelectionState:
    view = registry[state.active_view]
    if view.card_metric(key) is None:
        logger.debug("ignoring unknown card metric %r for view %s", key, state.active_view.value)
        return state
    cards = dict(state.cards)
    cards[state.active_view] = _flip(state.card_selection, key)
    return replace(state, cards=cards)


def set_card_selection(state: SelectionState, keys: Iterable[str], registry: ViewRegistry) -> SelectionState:
    allowed = registry[state.active_view].card_keys
    wanted = []
    for key in keys:
        if key in allowed and key not in wanted:
            wanted.append(key)
    if tuple(wanted) == state.card_selection:
        return state
    cards = dict(state.cards)
    cards[state.active_view] = tuple(wanted)
    return replace(state, cards=cards)


def switch_view(state: SelectionState, view_type: object, registry: ViewRegistry) -> SelectionState:
    resolved = registry.resolve(view_type)
    if resolved is None or resolved == state.active_view:
        return state
    return replace(state, active_view=resolved)
