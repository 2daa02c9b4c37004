from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Protocol, Tuple


DateRange = Tuple[Optional[datetime], Optional[datetime]]

# Smallest datetime step; stands in for the "one tick" before midnight
ONE_TICK = timedelta(microseconds=1)


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock pinned to one instant, for deterministic date buckets."""

    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def now(self) -> datetime:
        return self.moment


class DateFilterType(Enum):
    ALL_TIME = "AllTime"
    TODAY = "Today"
    PAST_WEEK = "PastWeek"
    PAST_MONTH = "PastMonth"
    PAST_3_MONTHS = "Past3Months"
    PAST_YEAR = "PastYear"
    CUSTOM_RANGE = "CustomRange"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES: Dict[DateFilterType, str] = {
    DateFilterType.ALL_TIME: "All Time",
    DateFilterType.TODAY: "Today",
    DateFilterType.PAST_WEEK: "Past Week",
    DateFilterType.PAST_MONTH: "Past Month",
    DateFilterType.PAST_3_MONTHS: "Past 3 Months",
    DateFilterType.PAST_YEAR: "Past Year",
    DateFilterType.CUSTOM_RANGE: "Custom Range",
}

_LOOKBACK_DAYS: Dict[DateFilterType, int] = {
    DateFilterType.PAST_WEEK: 7,
    DateFilterType.PAST_MONTH: 30,
    DateFilterType.PAST_3_MONTHS: 90,
    DateFilterType.PAST_YEAR: 365,
}

_DESCRIPTIONS: Dict[DateFilterType, str] = {
    DateFilterType.ALL_TIME: "Showing packages from all time periods",
    DateFilterType.TODAY: "Showing packages modified today",
    DateFilterType.PAST_WEEK: "Showing packages modified in the past 7 days",
    DateFilterType.PAST_MONTH: "Showing packages modified in the past 30 days",
    DateFilterType.PAST_3_MONTHS: "Showing packages modified in the past 90 days",
    DateFilterType.PAST_YEAR: "Showing packages modified in the past year",
}

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _format_day(value: datetime) -> str:
    # Fixed month table so output does not follow the process locale
    return f"{_MONTHS[value.month - 1]} {value.day:02d}, {value.year:04d}"


def midnight(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass
class DateFilter:
    filter_type: DateFilterType = DateFilterType.ALL_TIME
    custom_start: Optional[datetime] = None
    custom_end: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.filter_type.display_name

    def get_date_range(self, now: datetime) -> DateRange:
        """Resolve the selection to a concrete ``(start, end)`` interval.

        No validation happens here: a custom range with ``start > end`` is
        returned as given and simply matches nothing.
        """
        ft = self.filter_type
        if ft is DateFilterType.ALL_TIME:
            return None, None
        today = midnight(now)
        if ft is DateFilterType.TODAY:
            return today, today + timedelta(days=1) - ONE_TICK
        if ft is DateFilterType.CUSTOM_RANGE:
            return self.custom_start, self.custom_end
        return today - timedelta(days=_LOOKBACK_DAYS[ft]), now

    def matches_filter(self, date: Optional[datetime], now: datetime) -> bool:
        if date is None:
            return self.filter_type is DateFilterType.ALL_TIME
        start, end = self.get_date_range(now)
        if start is not None and date < start:
            return False
        if end is not None and date > end:
            return False
        return True

    def get_description(self, now: datetime) -> str:
        ft = self.filter_type
        if ft is not DateFilterType.CUSTOM_RANGE:
            return _DESCRIPTIONS[ft]
        start, end = self.get_date_range(now)
        if start is not None and end is not None:
            return f"Showing packages from {_format_day(start)} to {_format_day(end)}"
        if start is not None:
            return f"Showing packages from {_format_day(start)} onwards"
        if end is not None:
            return f"Showing packages up to {_format_day(end)}"
        return _DESCRIPTIONS[DateFilterType.ALL_TIME]

    def is_active(self) -> bool:
        return self.filter_type is not DateFilterType.ALL_TIME

    def clear(self) -> None:
        self.filter_type = DateFilterType.ALL_TIME
        self.custom_start = None
        self.custom_end = None

    def copy(self) -> "DateFilter":
        return DateFilter(self.filter_type, self.custom_start, self.custom_end)
