from __future__ import annotations

import math

from engine.formatting import format_change, format_value, round_half_up
from engine.registry import Unit


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(None) is None
    assert round_half_up("abc") is None


def test_format_value_by_unit() -> None:
    assert format_value(12345) == "12,345"
    assert format_value(12.34, Unit.PERCENT) == "12.3%"
    assert format_value(3.25, Unit.HOURS) == "3.3h"
    assert format_value(44.6, Unit.MINUTES) == "45m"
    assert format_value(1500, Unit.LOC) == "1,500 LOC"
    assert format_value(1.46, Unit.RATIO) == "1.5"
    assert format_value(float("nan")) == "N/A"


def test_format_change() -> None:
    assert format_change(12.345) == "+12.3%"
    assert format_change(-4) == "-4.0%"
    assert format_change(0) == "+0.0%"
    assert format_change(math.inf) == "∞"
    assert format_change(-math.inf) == "-∞"
    assert format_change(None) == "N/A"
