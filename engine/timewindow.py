from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd


logger = logging.getLogger(__name__)


class TimeRange(str, Enum):
    ONE_WEEK = "1week"
    FIFTEEN_DAYS = "15days"
    ONE_MONTH = "1month"
    THREE_MONTHS = "3month"
    SIX_MONTHS = "6month"
    ONE_YEAR = "1year"

    @property
    def offset(self) -> pd.DateOffset:
        return _OFFSETS[self]

    @property
    def label(self) -> str:
        return TIME_RANGE_LABELS[self]

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TimeRange):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, TimeRange):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, TimeRange):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, TimeRange):
            return NotImplemented
        return self.rank >= other.rank


_ORDER = [
    TimeRange.ONE_WEEK,
    TimeRange.FIFTEEN_DAYS,
    TimeRange.ONE_MONTH,
    TimeRange.THREE_MONTHS,
    TimeRange.SIX_MONTHS,
    TimeRange.ONE_YEAR,
]

# Month/year offsets are calendar-aware (Mar 31 - 1 month -> Feb 28/29).
_OFFSETS: Dict[TimeRange, pd.DateOffset] = {
    TimeRange.ONE_WEEK: pd.DateOffset(days=7),
    TimeRange.FIFTEEN_DAYS: pd.DateOffset(days=15),
    TimeRange.ONE_MONTH: pd.DateOffset(months=1),
    TimeRange.THREE_MONTHS: pd.DateOffset(months=3),
    TimeRange.SIX_MONTHS: pd.DateOffset(months=6),
    TimeRange.ONE_YEAR: pd.DateOffset(months=12),
}

TIME_RANGE_LABELS: Dict[TimeRange, str] = {
    TimeRange.ONE_WEEK: "1 Week",
    TimeRange.FIFTEEN_DAYS: "15 Days",
    TimeRange.ONE_MONTH: "1 Month",
    TimeRange.THREE_MONTHS: "3 Months",
    TimeRange.SIX_MONTHS: "6 Months",
    TimeRange.ONE_YEAR: "1 Year",
}

DEFAULT_TIME_RANGE = TimeRange.ONE_YEAR


def parse_time_range(value: object, default: TimeRange = DEFAULT_TIME_RANGE) -> TimeRange:
    if isinstance(value, TimeRange):
        return value
    try:
        return TimeRange(str(value).strip())
    except ValueError:
        return default


def to_timestamp(value: object) -> Optional[pd.Timestamp]:
    """Parse a record timestamp; tz-aware values become naive UTC. None if unparsable."""
    if value is None or value == "":
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def window_start(now: object, time_range: TimeRange) -> pd.Timestamp:
    now_ts = to_timestamp(now)
    if now_ts is None:
        raise ValueError(f"now is not a valid instant: {now!r}")
    return (now_ts - time_range.offset).normalize()


def filter_series(
    records: Iterable[Mapping[str, Any]],
    start: object,
    now: object,
    *,
    date_field: str = "date",
    descending: bool = False,
) -> List[Mapping[str, Any]]:
    """Return records whose day falls inside ``[start, now]``, sorted by timestamp.

    Both bounds and record timestamps are compared at day granularity on the
    lower side, so a record stamped later today than ``now`` is still kept.
    The records themselves are returned untouched.
    """
    start_ts = to_timestamp(start)
    now_ts = to_timestamp(now)
    if start_ts is None or now_ts is None:
        return []
    start_ts = start_ts.normalize()

    kept: List[tuple] = []
    dropped = 0
    for pos, record in enumerate(records):
        ts = to_timestamp(record.get(date_field)) if isinstance(record, Mapping) else None
        if ts is None:
            dropped += 1
            continue
        day = ts.normalize()
        if start_ts <= day <= now_ts:
            kept.append((ts, pos, record))
    if dropped:
        logger.debug("filter_series dropped %d record(s) without a usable %r", dropped, date_field)

    kept.sort(key=lambda item: (item[0], item[1]))
    ordered = [record for _, _, record in kept]
    if descending:
        ordered.reverse()
    return ordered


def apply_time_range(
    records: Sequence[Mapping[str, Any]],
    time_range: TimeRange,
    now: object,
    *,
    date_field: str = "date",
    descending: bool = False,
) -> List[Mapping[str, Any]]:
    return filter_series(
        records,
        window_start(now, time_range),
        now,
        date_field=date_field,
        descending=descending,
    )
