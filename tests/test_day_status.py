"""Tests for day status classification and its presentation helpers."""

from __future__ import annotations

from datetime import date

import pytest

from habitsage.services.completions import CompletionLedger, create_record
from habitsage.services.day_status import (
    DayStatus,
    calendar_marks,
    can_edit,
    classify,
    status_message,
    summarize_range,
)
from habitsage.services.frequency import daily, x_times_per_period

from factories import make_habit, make_ledger

TODAY = date(2024, 1, 10)  # a Wednesday


class TestClassify:
    def test_locked_before_start_even_with_a_record(self):
        habit = make_habit(start_date=date(2024, 1, 5))
        ledger = make_ledger(done=[date(2024, 1, 4)])

        assert classify(habit, ledger, date(2024, 1, 4), today=TODAY) is DayStatus.LOCKED

    def test_not_scheduled_beats_completed(self):
        habit = make_habit(daily("monday", "wednesday", "friday"), start_date=date(2024, 1, 1))
        ledger = make_ledger(done=[date(2024, 1, 2)])

        assert classify(habit, ledger, date(2024, 1, 2), today=TODAY) is DayStatus.NOT_SCHEDULED

    def test_scheduled_weekdays_scenario(self):
        habit = make_habit(daily("monday", "wednesday", "friday"), start_date=date(2024, 1, 1))
        ledger = make_ledger(done=[date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5)])

        assert classify(habit, ledger, date(2024, 1, 2), today=date(2024, 1, 5)) is (
            DayStatus.NOT_SCHEDULED
        )
        assert classify(habit, ledger, date(2024, 1, 3), today=date(2024, 1, 5)) is (
            DayStatus.COMPLETED
        )

    def test_completed(self):
        habit = make_habit()
        ledger = make_ledger(done=[date(2024, 1, 9)])

        assert classify(habit, ledger, date(2024, 1, 9), today=TODAY) is DayStatus.COMPLETED

    def test_skipped_beats_completed_flag(self):
        habit = make_habit()
        ledger = CompletionLedger(
            [create_record(1, date(2024, 1, 9), completed=True, skipped=True)]
        )

        assert classify(habit, ledger, date(2024, 1, 9), today=TODAY) is DayStatus.SKIPPED

    def test_future(self):
        habit = make_habit()

        assert classify(habit, [], date(2024, 1, 11), today=TODAY) is DayStatus.FUTURE_LOCKED

    def test_missed_past_day(self):
        habit = make_habit()

        assert classify(habit, [], date(2024, 1, 9), today=TODAY) is DayStatus.MISSED

    def test_scheduled_today(self):
        habit = make_habit()

        assert classify(habit, [], TODAY, today=TODAY) is DayStatus.SCHEDULED

    def test_record_without_outcome_is_still_open(self):
        habit = make_habit()
        ledger = CompletionLedger([create_record(1, TODAY, actual_amount=0.5)])

        assert classify(habit, ledger, TODAY, today=TODAY) is DayStatus.SCHEDULED

    def test_unreadable_date_returns_default(self):
        habit = make_habit()

        assert classify(habit, [], "tomorrow-ish", today=TODAY) is DayStatus.DEFAULT

    def test_unreadable_start_date_returns_default(self):
        habit = make_habit(start_date="last spring")

        assert classify(habit, [], TODAY, today=TODAY) is DayStatus.DEFAULT

    def test_deterministic(self):
        habit = make_habit(x_times_per_period(2, "week"))
        ledger = make_ledger(done=[date(2024, 1, 8)])

        first = classify(habit, ledger, date(2024, 1, 9), today=TODAY)
        second = classify(habit, ledger, date(2024, 1, 9), today=TODAY)
        assert first is second


class TestQuotaClassify:
    def test_met_quota_suppresses_later_days(self):
        habit = make_habit(x_times_per_period(2, "week"))
        ledger = make_ledger(done=[date(2024, 1, 7), date(2024, 1, 8)])

        assert classify(habit, ledger, date(2024, 1, 9), today=TODAY) is DayStatus.PERIOD_COMPLETED

    def test_period_completed_beats_future(self):
        habit = make_habit(x_times_per_period(2, "week"))
        ledger = make_ledger(done=[date(2024, 1, 7), date(2024, 1, 8)])

        assert classify(habit, ledger, date(2024, 1, 12), today=TODAY) is (
            DayStatus.PERIOD_COMPLETED
        )

    def test_acted_on_days_keep_their_status(self):
        habit = make_habit(x_times_per_period(2, "week"))
        ledger = make_ledger(done=[date(2024, 1, 7), date(2024, 1, 8)])

        assert classify(habit, ledger, date(2024, 1, 8), today=TODAY) is DayStatus.COMPLETED

    def test_past_day_in_open_week_is_still_scheduled(self):
        habit = make_habit(x_times_per_period(3, "week"))
        ledger = make_ledger(done=[date(2024, 1, 7)])

        assert classify(habit, ledger, date(2024, 1, 8), today=TODAY) is DayStatus.SCHEDULED

    def test_past_day_in_closed_week_is_missed(self):
        habit = make_habit(x_times_per_period(3, "week"))
        ledger = make_ledger(done=[date(2024, 1, 2)])

        assert classify(habit, ledger, date(2024, 1, 3), today=TODAY) is DayStatus.MISSED

    def test_week_straddling_month_end_stays_open_until_saturday(self):
        habit = make_habit(x_times_per_period(2, "week"))
        ledger = make_ledger(done=[date(2024, 1, 29)])

        assert classify(habit, ledger, date(2024, 1, 30), today=date(2024, 2, 2)) is (
            DayStatus.SCHEDULED
        )
        assert classify(habit, ledger, date(2024, 1, 30), today=date(2024, 2, 4)) is (
            DayStatus.MISSED
        )


@pytest.mark.parametrize(
    ("status", "editable"),
    [
        (DayStatus.SCHEDULED, True),
        (DayStatus.COMPLETED, True),
        (DayStatus.SKIPPED, True),
        (DayStatus.MISSED, True),
        (DayStatus.LOCKED, False),
        (DayStatus.NOT_SCHEDULED, False),
        (DayStatus.PERIOD_COMPLETED, False),
        (DayStatus.FUTURE_LOCKED, False),
        (DayStatus.DEFAULT, False),
    ],
)
def test_can_edit(status, editable):
    assert can_edit(status) is editable


class TestStatusMessage:
    def test_locked_mentions_start_date(self):
        habit = make_habit(start_date=date(2024, 1, 20))

        message = status_message(DayStatus.LOCKED, habit)
        assert message.title == "Day Locked"
        assert message.description == "This habit starts on January 20, 2024"

    def test_locked_without_start(self):
        assert status_message(DayStatus.LOCKED).description == "This habit is not yet available"

    def test_missed_is_destructive(self):
        message = status_message(DayStatus.MISSED)
        assert message.title == "Missed"
        assert message.variant == "destructive"

    def test_default(self):
        assert status_message(DayStatus.DEFAULT).title == "Default"


class TestRangeHelpers:
    def _history(self):
        habit = make_habit(start_date=date(2024, 1, 1))
        ledger = make_ledger(
            done=[date(2024, 1, 1), date(2024, 1, 3)], skipped=[date(2024, 1, 2)]
        )
        return habit, ledger

    def test_summarize_range(self):
        habit, ledger = self._history()

        summary = summarize_range(
            habit, ledger, date(2023, 12, 31), date(2024, 1, 5), today=date(2024, 1, 5)
        )
        assert summary.total_days == 6
        assert summary.completed == 2
        assert summary.skipped == 1
        assert summary.missed == 1
        assert summary.scheduled == 1
        assert summary.total_scheduled == 5
        assert summary.completion_rate == pytest.approx(0.4)

    def test_summarize_inverted_range_is_empty(self):
        habit, ledger = self._history()

        summary = summarize_range(habit, ledger, date(2024, 1, 5), date(2024, 1, 1))
        assert summary.total_days == 0
        assert summary.completion_rate == 0.0

    def test_calendar_marks(self):
        habit, ledger = self._history()

        marks = calendar_marks(habit, ledger, today=date(2024, 1, 5))
        assert marks.completed == [date(2024, 1, 1), date(2024, 1, 3)]
        assert marks.skipped == [date(2024, 1, 2)]
        assert marks.missed == [date(2024, 1, 4)]
        assert marks.period_completed == []

    def test_calendar_marks_for_quota_habit(self):
        habit = make_habit(x_times_per_period(1, "week"), start_date=date(2024, 1, 7))
        ledger = make_ledger(done=[date(2024, 1, 7)])

        marks = calendar_marks(habit, ledger, today=date(2024, 1, 10))
        assert marks.completed == [date(2024, 1, 7)]
        assert marks.period_completed == [date(2024, 1, 8), date(2024, 1, 9)]
