"""Tests for the complete/un-complete streak transitions."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from habitkeeper.errors import HabitNotDueError
from habitkeeper.models.frequency import Daily, EveryXDays, Weekly
from habitkeeper.models.habit import Habit, HabitLogEntry, LogStatus
from habitkeeper.services.streaks import WriteAction, compute_toggle, is_completed_today

NY = ZoneInfo("America/New_York")
TODAY = datetime(2024, 3, 5, tzinfo=NY)
YESTERDAY = datetime(2024, 3, 4, tzinfo=NY)


def _habit(frequency=None, streak=0, last=None) -> Habit:
    habit = Habit(id=11, user_id=1, name="Read", streak=streak, last_completed_date=last)
    habit.set_frequency(frequency or Daily())
    return habit


def _log(status: LogStatus, log_id: int = 7) -> HabitLogEntry:
    return HabitLogEntry(id=log_id, habit_id=11, user_id=1, date=TODAY, status=status.value)


class TestComplete:
    def test_first_completion_inserts_log(self, tz):
        outcome = compute_toggle(_habit(), None, TODAY, tz)

        assert outcome.completed is True
        assert outcome.new_streak == 1
        assert outcome.new_last_completed_date == TODAY
        assert outcome.habit_changed is True
        assert outcome.log_write.action is WriteAction.INSERT
        assert outcome.log_write.status is LogStatus.COMPLETED
        assert outcome.log_write.date == TODAY
        assert outcome.log_write.habit_id == 11

    @pytest.mark.parametrize("streak", [0, 1, 6, 120])
    def test_completion_increments_streak(self, tz, streak):
        habit = _habit(streak=streak, last=YESTERDAY if streak else None)

        outcome = compute_toggle(habit, None, TODAY, tz)

        assert outcome.new_streak == streak + 1
        assert outcome.new_last_completed_date == TODAY

    def test_existing_pending_log_is_updated(self, tz):
        outcome = compute_toggle(_habit(streak=2, last=YESTERDAY), _log(LogStatus.PENDING), TODAY, tz)

        assert outcome.log_write.action is WriteAction.UPDATE
        assert outcome.log_write.log_id == 7
        assert outcome.log_write.status is LogStatus.COMPLETED
        assert outcome.new_streak == 3

    def test_skipped_log_counts_as_not_completed(self, tz):
        outcome = compute_toggle(_habit(), _log(LogStatus.SKIPPED), TODAY, tz)

        assert outcome.completed is True
        assert outcome.log_write.action is WriteAction.UPDATE


class TestUncomplete:
    def test_undo_today_decrements_and_clears(self, tz):
        habit = _habit(streak=5, last=TODAY)

        outcome = compute_toggle(habit, _log(LogStatus.COMPLETED), TODAY, tz)

        assert outcome.completed is False
        assert outcome.new_streak == 4
        assert outcome.new_last_completed_date is None
        assert outcome.habit_changed is True
        assert outcome.log_write.action is WriteAction.UPDATE
        assert outcome.log_write.status is LogStatus.PENDING
        assert outcome.log_write.log_id == 7

    def test_streak_never_goes_negative(self, tz):
        outcome = compute_toggle(_habit(streak=0, last=TODAY), _log(LogStatus.COMPLETED), TODAY, tz)

        assert outcome.new_streak == 0
        assert outcome.new_last_completed_date is None

    def test_last_completed_in_utc_still_matches(self, tz):
        # Values read back from storage are UTC; the same-day check compares UTC dates.
        habit = _habit(streak=3, last=TODAY.astimezone(timezone.utc))

        outcome = compute_toggle(habit, _log(LogStatus.COMPLETED), TODAY, tz)

        assert outcome.new_streak == 2
        assert outcome.new_last_completed_date is None

    def test_other_day_completion_only_reopens_log(self, tz):
        habit = _habit(streak=4, last=YESTERDAY)

        outcome = compute_toggle(habit, _log(LogStatus.COMPLETED), TODAY, tz)

        assert outcome.new_streak == 4
        assert outcome.new_last_completed_date == YESTERDAY
        assert outcome.habit_changed is False
        assert outcome.log_write.status is LogStatus.PENDING

    def test_completed_but_no_longer_due_can_be_undone(self, tz):
        habit = _habit(EveryXDays(3), streak=1, last=TODAY)

        outcome = compute_toggle(habit, _log(LogStatus.COMPLETED), TODAY, tz)

        assert outcome.completed is False
        assert outcome.new_streak == 0


class TestPreconditions:
    def test_not_due_and_not_completed_is_rejected(self, tz):
        habit = _habit(EveryXDays(3), streak=1, last=YESTERDAY)

        with pytest.raises(HabitNotDueError):
            compute_toggle(habit, None, TODAY, tz)

    def test_weekly_done_this_week_is_rejected(self, tz):
        habit = _habit(Weekly(), streak=1, last=datetime(2024, 3, 4, tzinfo=NY))

        with pytest.raises(HabitNotDueError):
            compute_toggle(habit, _log(LogStatus.PENDING), TODAY, tz)

    def test_is_completed_today(self):
        assert is_completed_today(_log(LogStatus.COMPLETED))
        assert not is_completed_today(_log(LogStatus.PENDING))
        assert not is_completed_today(None)


class TestReferenceDayNormalization:
    def test_naive_reference_day(self, tz):
        habit = _habit(EveryXDays(3), streak=1, last=datetime(2024, 3, 2, tzinfo=NY))

        outcome = compute_toggle(habit, None, datetime(2024, 3, 5), tz)

        assert outcome.new_streak == 2
        assert outcome.log_write.date == TODAY
        assert outcome.log_write.date.utcoffset() is not None

    def test_naive_reference_day_not_due(self, tz):
        habit = _habit(EveryXDays(3), streak=1, last=YESTERDAY)

        with pytest.raises(HabitNotDueError):
            compute_toggle(habit, None, datetime(2024, 3, 5), tz)

    def test_mid_day_reference_logs_start_of_day(self, tz):
        outcome = compute_toggle(_habit(), None, datetime(2024, 3, 5, 18, 45, tzinfo=NY), tz)

        assert outcome.log_write.date == TODAY
        assert outcome.new_last_completed_date == TODAY

    def test_mid_day_undo_matches_completion_day(self, tz):
        habit = _habit(streak=2, last=TODAY)

        outcome = compute_toggle(
            habit, _log(LogStatus.COMPLETED), datetime(2024, 3, 5, 23, 30, tzinfo=NY), tz
        )

        assert outcome.new_streak == 1
        assert outcome.new_last_completed_date is None


class TestEastOfUtc:
    TOKYO = ZoneInfo("Asia/Tokyo")

    def test_undo_same_local_day(self):
        today = datetime(2024, 3, 5, tzinfo=self.TOKYO)
        habit = _habit(streak=3, last=today.astimezone(timezone.utc))

        outcome = compute_toggle(habit, _log(LogStatus.COMPLETED), today, self.TOKYO)

        assert outcome.new_streak == 2
        assert outcome.new_last_completed_date is None

    def test_undo_compares_utc_dates(self):
        # 00:00 UTC on March 5th is 09:00 on March 5th in Tokyo, but the
        # reference day (March 5th 00:00 JST) is still March 4th in UTC.
        today = datetime(2024, 3, 5, tzinfo=self.TOKYO)
        habit = _habit(streak=3, last=datetime(2024, 3, 5, tzinfo=timezone.utc))

        outcome = compute_toggle(habit, _log(LogStatus.COMPLETED), today, self.TOKYO)

        assert outcome.completed is False
        assert outcome.new_streak == 3
        assert outcome.habit_changed is False
