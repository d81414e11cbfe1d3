"""Month-view aggregation of habit log entries."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Iterable, Optional, Protocol

from ..models.habit import LogStatus
from .calendar_day import local_date, local_midnight


class LoggedDay(Protocol):
    """Log entry fields the aggregator reads."""

    @property
    def date(self) -> datetime: ...

    @property
    def status(self) -> str: ...


@dataclass(slots=True)
class DaySummary:
    """Completion counts for one calendar day."""

    completed_count: int = 0
    total_logged: int = 0


class DayCompletion(str, Enum):
    """How a calendar cell is shaded."""

    ALL = "all"  # every logged habit completed
    PARTIAL = "partial"
    NONE = "none"  # logged, nothing completed
    EMPTY = "empty"  # nothing logged


def aggregate_month(
    entries: Iterable[LoggedDay],
    *,
    year: int,
    month: int,
    tz: Optional[tzinfo] = None,
) -> dict[str, DaySummary]:
    """Fold log entries into per-day counts keyed by ISO local date.

    Entries outside the month are skipped. Days without entries are absent
    from the result. Entries are not de-duplicated across habits, so three
    habits logged on one day give ``total_logged == 3``.
    """

    summaries: dict[str, DaySummary] = {}
    for entry in entries:
        day = local_date(entry.date, tz)
        if day.year != year or day.month != month:
            continue
        summary = summaries.setdefault(day.isoformat(), DaySummary())
        summary.total_logged += 1
        if entry.status == LogStatus.COMPLETED:
            summary.completed_count += 1
    return summaries


def month_bounds(year: int, month: int, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """Return the local midnights of the first and last day of the month (inclusive)."""

    last_day = calendar.monthrange(year, month)[1]
    return (
        local_midnight(date(year, month, 1), tz),
        local_midnight(date(year, month, last_day), tz),
    )


def classify_day(summary: Optional[DaySummary]) -> DayCompletion:
    if summary is None or summary.total_logged == 0:
        return DayCompletion.EMPTY
    if summary.completed_count == 0:
        return DayCompletion.NONE
    if summary.completed_count == summary.total_logged:
        return DayCompletion.ALL
    return DayCompletion.PARTIAL


def month_grid(year: int, month: int) -> list[list[Optional[date]]]:
    """Return Sunday-first weeks for the month; padding cells are None."""

    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    return [
        [day if day.month == month else None for day in week]
        for week in cal.monthdatescalendar(year, month)
    ]


__all__ = [
    "DayCompletion",
    "DaySummary",
    "LoggedDay",
    "aggregate_month",
    "classify_day",
    "month_bounds",
    "month_grid",
]
