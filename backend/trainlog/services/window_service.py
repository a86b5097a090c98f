"""Time-window filtering for record collections.

Two kinds of window are used and they deliberately differ:

- Chart windows (week/month/year) are relative to now and inclusive of the
  cutoff. A week is a fixed 7 days, month and year use calendar arithmetic.
- The report window is an absolute "since" date (3 calendar months back by
  default) and is exclusive of the boundary.
"""

import calendar
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, Sequence, TypeVar

from trainlog.schemas.records import (
    BodyMeasurementRecord,
    TrainingCycleRecord,
    to_naive_utc,
)

T = TypeVar("T")


class TimeWindow(str, Enum):
    """Relative chart windows."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def months_ago(now: datetime, months: int) -> datetime:
    """
    Subtract calendar months from a timestamp.

    The day is clamped to the length of the target month, so 31 March minus
    one month is 28 (or 29) February.
    """
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def record_timestamp(record: object) -> Optional[datetime]:
    """Timestamp a record is windowed and ordered by."""
    if isinstance(record, BodyMeasurementRecord):
        return record.timestamp
    if isinstance(record, TrainingCycleRecord):
        return record.start_date
    return getattr(record, "created_at", None)


def _on_or_after(record: object, cutoff: datetime) -> bool:
    timestamp = record_timestamp(record)
    return timestamp is not None and timestamp >= cutoff


def _after(record: object, since: datetime) -> bool:
    timestamp = record_timestamp(record)
    return timestamp is not None and timestamp > since


def current_time() -> datetime:
    """Dependency providing the reference time of a request."""
    return datetime.utcnow()


class TimeWindowFilter:
    """Restrict record collections to a time window."""

    WEEK_DAYS = 7

    def cutoff_for(self, window: TimeWindow, now: Optional[datetime] = None) -> datetime:
        """Start of a relative window ending at now."""
        now = to_naive_utc(now) or datetime.utcnow()
        window = TimeWindow(window)
        if window == TimeWindow.WEEK:
            return now - timedelta(days=self.WEEK_DAYS)
        if window == TimeWindow.MONTH:
            return months_ago(now, 1)
        return months_ago(now, 12)

    def filter_by_relative_window(
        self,
        records: Iterable[T],
        window: TimeWindow,
        now: Optional[datetime] = None,
    ) -> Sequence[T]:
        """
        Keep records at or after the start of a week/month/year window.

        Input order is preserved. Records without a timestamp are dropped.
        """
        cutoff = self.cutoff_for(window, now)
        return tuple(record for record in records if _on_or_after(record, cutoff))

    def filter_by_absolute_window(self, records: Iterable[T], since: datetime) -> Sequence[T]:
        """Keep records strictly after since. Input order is preserved."""
        since = to_naive_utc(since)
        return tuple(record for record in records if _after(record, since))

    def report_window_start(self, now: Optional[datetime] = None, months: int = 3) -> datetime:
        """Start of the "last N calendar months" report window."""
        return months_ago(to_naive_utc(now) or datetime.utcnow(), months)


# Singleton instance
window_filter = TimeWindowFilter()
