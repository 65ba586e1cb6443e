from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from engine.registry import Unit


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return number
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(number)).quantize(q, rounding=ROUND_HALF_UP))


def format_value(value: object, unit: Unit = Unit.COUNT) -> str:
    number = round_half_up(value, 0 if unit in (Unit.COUNT, Unit.LOC, Unit.MINUTES) else 1)
    if number is None or math.isnan(number):
        return "N/A"
    if unit == Unit.PERCENT:
        return f"{number:.1f}%"
    if unit == Unit.HOURS:
        return f"{number:.1f}h"
    if unit == Unit.MINUTES:
        return f"{number:,.0f}m"
    if unit == Unit.LOC:
        return f"{number:,.0f} LOC"
    if unit == Unit.RATIO:
        return f"{number:.1f}"
    return f"{number:,.0f}"


def format_change(change: object) -> str:
    """Signed percent with one decimal; growth from zero renders as ``∞``."""
    number = round_half_up(change, 1)
    if number is None or math.isnan(number):
        return "N/A"
    if math.isinf(number):
        return "∞" if number > 0 else "-∞"
    return f"{number:+.1f}%"
