"""Calendar-day helpers: local-day boundaries, UTC weeks and the reference day.

Every function taking ``tz`` treats ``None`` as the system local timezone.
Naive datetimes are read as wall-clock time in that zone; aware datetimes are
converted into it first. Results are always timezone-aware.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Python weekdays start on Monday=0; weeks here start on Sunday.
_SUNDAY_OFFSET = 1


def _to_local(instant: datetime, tz: Optional[tzinfo]) -> datetime:
    if tz is None:
        return instant.astimezone()
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    return instant.astimezone(tz)


def _localize(day: date, wall: time, tz: Optional[tzinfo]) -> datetime:
    naive = datetime.combine(day, wall)
    if tz is None:
        # astimezone() on a naive value resolves the system offset for that date.
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def local_date(instant: datetime, tz: Optional[tzinfo] = None) -> date:
    """Return the calendar date ``instant`` falls on in the local timezone."""

    return _to_local(instant, tz).date()


def local_midnight(day: date, tz: Optional[tzinfo] = None) -> datetime:
    """Return 00:00 local time on the calendar date ``day``."""

    return _localize(day, time(0, 0), tz)


def start_of_local_day(instant: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Truncate ``instant`` to 00:00:00.000 of its local calendar day."""

    return local_midnight(local_date(instant, tz), tz)


def start_of_utc_week(instant: datetime) -> datetime:
    """Return the most recent Sunday 00:00 UTC at or before the instant's UTC date."""

    utc = instant.astimezone(timezone.utc)
    days_since_sunday = (utc.weekday() + _SUNDAY_OFFSET) % 7
    midnight = datetime(utc.year, utc.month, utc.day, tzinfo=timezone.utc)
    return midnight - timedelta(days=days_since_sunday)


def add_days(instant: datetime, days: int, tz: Optional[tzinfo] = None) -> datetime:
    """Move ``instant`` by ``days`` calendar days on its local date fields.

    The local wall-clock time is kept, so a local midnight stays a local
    midnight across daylight-saving transitions.
    """

    local = _to_local(instant, tz)
    return _localize(local.date() + timedelta(days=days), local.time(), tz)


def same_day(first: datetime, second: datetime) -> bool:
    """Return True when both instants fall on the same UTC calendar date."""

    # NOTE: compares UTC dates while start_of_local_day truncates in local time.
    # Streak undo relies on this comparison; near midnight in zones far from
    # UTC the two can disagree. Left as-is pending a product decision.
    return first.astimezone(timezone.utc).date() == second.astimezone(timezone.utc).date()


def reference_day(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    """Return the start of "today" in the local timezone.

    ``now`` defaults to the system clock; pass it explicitly to pin the day.
    """

    if now is None:
        now = datetime.now(timezone.utc)
    return start_of_local_day(now, tz)


class ReferenceDayClock:
    """Track the current reference day and notice midnight rollovers.

    The host calls :meth:`refresh` on a fixed interval (``REFERENCE_DAY_REFRESH_SECONDS``)
    and re-evaluates due habits when it returns True.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
    ):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tz = tz
        self._current = reference_day(self._clock(), tz)

    @property
    def current(self) -> datetime:
        return self._current

    def refresh(self) -> bool:
        """Recompute the reference day; return True if it changed."""
        latest = reference_day(self._clock(), self._tz)
        if latest == self._current:
            return False
        logger.info(
            "Reference day rolled over",
            extra={"previous": self._current.isoformat(), "current": latest.isoformat()},
        )
        self._current = latest
        return True


__all__ = [
    "ReferenceDayClock",
    "add_days",
    "local_date",
    "local_midnight",
    "reference_day",
    "same_day",
    "start_of_local_day",
    "start_of_utc_week",
]
