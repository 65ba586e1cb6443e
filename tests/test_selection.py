from __future__ import annotations

from engine.registry import ViewRegistry, ViewType
from engine.selection import (
    default_selection,
    set_card_selection,
    switch_view,
    toggle_card_metric,
    toggle_chart_metric,
)


def test_default_selection_enables_everything(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    assert state.active_view == ViewType.DISTRIBUTION
    assert state.chart_selection == ("a", "b", "c")
    assert state.card_selection == ("a", "b", "c")
    assert state.cards[ViewType.STATUS] == ("open", "merged", "ratio")


def test_toggle_removes_then_adds(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    removed = toggle_chart_metric(state, "b", registry)
    assert removed.chart_selection == ("a", "c")
    restored = toggle_chart_metric(removed, "b", registry)
    assert set(restored.chart_selection) == {"a", "b", "c"}


def test_last_chart_metric_cannot_be_removed(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    state = toggle_chart_metric(state, "a", registry)
    state = toggle_chart_metric(state, "b", registry)
    assert state.chart_selection == ("c",)
    assert toggle_chart_metric(state, "c", registry) is state


def test_unknown_keys_are_ignored(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    assert toggle_chart_metric(state, "zzz", registry) is state
    assert toggle_card_metric(state, "zzz", registry) is state
    assert switch_view(state, "nope", registry) is state
    assert switch_view(state, ViewType.CYCLE_TIME, registry) is state


def test_card_selection_may_be_emptied(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    for key in ("a", "b", "c"):
        state = toggle_card_metric(state, key, registry)
    assert state.card_selection == ()
    assert state.chart_selection == ("a", "b", "c")


def test_set_card_selection_filters_and_dedupes(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    picked = set_card_selection(state, ["c", "x", "c", "a"], registry)
    assert picked.card_selection == ("c", "a")
    assert set_card_selection(picked, ["c", "a"], registry) is picked


def test_selections_are_kept_per_view(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    state = toggle_chart_metric(state, "a", registry)
    state = switch_view(state, "status", registry)
    assert state.active_view == ViewType.STATUS
    assert state.chart_selection == ("open", "merged")
    state = toggle_card_metric(state, "ratio", registry)
    state = switch_view(state, ViewType.DISTRIBUTION, registry)
    assert state.chart_selection == ("b", "c")
    assert state.cards[ViewType.STATUS] == ("open", "merged")


def test_selection_is_not_mutated(registry: ViewRegistry) -> None:
    state = default_selection(registry)
    toggle_chart_metric(state, "a", registry)
    toggle_card_metric(state, "a", registry)
    assert state.chart_selection == ("a", "b", "c")
    assert state.card_selection == ("a", "b", "c")
