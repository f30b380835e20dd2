"""Tests for recurring appointment date generation."""

import logging
from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from clinicdesk.domain.scheduling.recurrence import (
    DEFAULT_MAX_OCCURRENCES,
    SAFETY_MAX_OCCURRENCES,
    RecurrenceFrequency,
    RecurrenceRule,
    generate_recurring_dates,
    get_recurrence_summary,
    sunday_based_weekday,
)

# Monday
START = datetime(2026, 1, 5, 10, 0)


class TestRecurrenceRule:
    def test_defaults_to_no_repetition(self):
        rule = RecurrenceRule()
        assert rule.frequency == RecurrenceFrequency.NONE
        assert rule.interval == 1
        assert rule.weekdays == frozenset()

    def test_accepts_camel_case_aliases(self):
        rule = RecurrenceRule.model_validate(
            {
                "frequency": "weekly",
                "interval": 2,
                "weekdays": [1, 3],
                "terminationDate": "2026-03-15",
                "terminationCount": 8,
            }
        )
        assert rule.weekdays == frozenset({1, 3})
        assert rule.termination_date == date(2026, 3, 15)
        assert rule.termination_count == 8

    def test_weekly_requires_weekdays(self):
        with pytest.raises(ValidationError, match="at least one weekday"):
            RecurrenceRule(frequency="weekly", weekdays=[])

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValidationError):
            RecurrenceRule(frequency="daily", interval=interval)

    def test_rejects_weekday_out_of_range(self):
        with pytest.raises(ValidationError, match="between 0"):
            RecurrenceRule(frequency="weekly", weekdays=[1, 7])

    def test_rejects_zero_count(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(frequency="daily", termination_count=0)

    def test_is_immutable(self):
        rule = RecurrenceRule(frequency="daily")
        with pytest.raises(ValidationError):
            rule.interval = 3


class TestGenerateRecurringDates:
    def test_none_returns_only_start(self):
        assert generate_recurring_dates(START, RecurrenceRule()) == [START]

    def test_none_ignores_termination_settings(self):
        rule = RecurrenceRule(frequency="none", termination_count=10)
        assert generate_recurring_dates(START, rule) == [START]

    def test_daily_nth_occurrence_is_n_minus_one_days_later(self):
        rule = RecurrenceRule(frequency="daily", termination_count=30)
        dates = generate_recurring_dates(START, rule)

        assert len(dates) == 30
        for n, occurrence in enumerate(dates, start=1):
            assert occurrence == START + timedelta(days=n - 1)

    def test_daily_with_interval(self):
        rule = RecurrenceRule(frequency="daily", interval=3, termination_count=4)
        assert generate_recurring_dates(START, rule) == [
            START,
            START + timedelta(days=3),
            START + timedelta(days=6),
            START + timedelta(days=9),
        ]

    def test_weekly_scenario_three_mondays(self):
        rule = RecurrenceRule.model_validate(
            {"frequency": "weekly", "interval": 1, "weekdays": [1], "terminationCount": 3}
        )
        assert generate_recurring_dates(START, rule) == [
            datetime(2026, 1, 5, 10, 0),
            datetime(2026, 1, 12, 10, 0),
            datetime(2026, 1, 19, 10, 0),
        ]

    def test_weekly_multiple_weekdays_in_order(self):
        rule = RecurrenceRule(frequency="weekly", weekdays=[1, 3], termination_count=4)
        assert generate_recurring_dates(START, rule) == [
            datetime(2026, 1, 5, 10, 0),  # Mon
            datetime(2026, 1, 7, 10, 0),  # Wed
            datetime(2026, 1, 12, 10, 0),  # Mon
            datetime(2026, 1, 14, 10, 0),  # Wed
        ]

    def test_weekly_every_two_weeks_is_fourteen_days_apart(self):
        rule = RecurrenceRule(frequency="weekly", interval=2, weekdays=[1], termination_count=6)
        dates = generate_recurring_dates(START, rule)

        assert len(dates) == 6
        for previous, current in zip(dates, dates[1:]):
            assert current - previous == timedelta(days=14)

    def test_weekly_every_two_weeks_with_two_weekdays(self):
        rule = RecurrenceRule(frequency="weekly", interval=2, weekdays=[1, 3], termination_count=4)
        assert generate_recurring_dates(START, rule) == [
            datetime(2026, 1, 5, 10, 0),
            datetime(2026, 1, 7, 10, 0),
            datetime(2026, 1, 19, 10, 0),
            datetime(2026, 1, 21, 10, 0),
        ]

    def test_weekly_start_not_on_selected_weekday(self):
        tuesday = datetime(2026, 1, 6, 9, 30)
        rule = RecurrenceRule(frequency="weekly", weekdays=[1], termination_count=2)
        assert generate_recurring_dates(tuesday, rule) == [
            datetime(2026, 1, 12, 9, 30),
            datetime(2026, 1, 19, 9, 30),
        ]

    def test_weekly_sunday_is_zero(self):
        rule = RecurrenceRule(frequency="weekly", weekdays=[0], termination_count=1)
        dates = generate_recurring_dates(START, rule)
        assert dates == [datetime(2026, 1, 11, 10, 0)]
        assert dates[0].strftime("%A") == "Sunday"
        assert sunday_based_weekday(dates[0]) == 0

    def test_monthly_same_day_of_month(self):
        rule = RecurrenceRule(frequency="monthly", termination_count=3)
        assert generate_recurring_dates(datetime(2026, 1, 15, 8, 0), rule) == [
            datetime(2026, 1, 15, 8, 0),
            datetime(2026, 2, 15, 8, 0),
            datetime(2026, 3, 15, 8, 0),
        ]

    def test_monthly_clamped_day_carries_forward(self):
        rule = RecurrenceRule(frequency="monthly", termination_count=4)
        assert generate_recurring_dates(datetime(2026, 1, 31, 14, 0), rule) == [
            datetime(2026, 1, 31, 14, 0),
            datetime(2026, 2, 28, 14, 0),
            datetime(2026, 3, 28, 14, 0),
            datetime(2026, 4, 28, 14, 0),
        ]

    def test_monthly_day_thirty_clamps_once_in_february(self):
        rule = RecurrenceRule(frequency="monthly", interval=2, termination_count=3)
        assert generate_recurring_dates(datetime(2025, 12, 30, 9, 0), rule) == [
            datetime(2025, 12, 30, 9, 0),
            datetime(2026, 2, 28, 9, 0),
            datetime(2026, 4, 28, 9, 0),
        ]

    def test_monthly_clamps_to_leap_day(self):
        rule = RecurrenceRule(frequency="monthly", termination_count=2)
        assert generate_recurring_dates(datetime(2028, 1, 31, 14, 0), rule)[1] == datetime(
            2028, 2, 29, 14, 0
        )

    def test_monthly_with_interval(self):
        rule = RecurrenceRule(frequency="monthly", interval=3, termination_count=3)
        assert generate_recurring_dates(datetime(2026, 1, 10, 8, 0), rule) == [
            datetime(2026, 1, 10, 8, 0),
            datetime(2026, 4, 10, 8, 0),
            datetime(2026, 7, 10, 8, 0),
        ]

    def test_termination_date_is_inclusive(self):
        rule = RecurrenceRule(frequency="daily", termination_date=date(2026, 1, 10))
        dates = generate_recurring_dates(START, rule)

        assert dates[0] == START
        assert dates[-1] == datetime(2026, 1, 10, 10, 0)
        assert len(dates) == 6

    def test_termination_date_before_start_yields_nothing(self):
        rule = RecurrenceRule(frequency="daily", termination_date=date(2026, 1, 1))
        assert generate_recurring_dates(START, rule) == []

    def test_weekly_with_termination_date(self):
        rule = RecurrenceRule(frequency="weekly", weekdays=[1, 5], termination_date=date(2026, 1, 16))
        assert generate_recurring_dates(START, rule) == [
            datetime(2026, 1, 5, 10, 0),
            datetime(2026, 1, 9, 10, 0),
            datetime(2026, 1, 12, 10, 0),
            datetime(2026, 1, 16, 10, 0),
        ]

    def test_count_wins_over_later_termination_date(self):
        rule = RecurrenceRule(
            frequency="daily", termination_count=3, termination_date=date(2026, 12, 31)
        )
        assert len(generate_recurring_dates(START, rule)) == 3

    def test_default_cap_without_termination(self):
        rule = RecurrenceRule(frequency="daily")
        assert len(generate_recurring_dates(START, rule)) == DEFAULT_MAX_OCCURRENCES

    def test_default_cap_applies_with_distant_termination_date(self):
        rule = RecurrenceRule(frequency="daily", termination_date=date(2027, 12, 31))
        assert len(generate_recurring_dates(START, rule)) == DEFAULT_MAX_OCCURRENCES

    def test_safety_cap_limits_large_counts(self, caplog):
        rule = RecurrenceRule(frequency="daily", termination_count=1000)

        with caplog.at_level(logging.WARNING):
            dates = generate_recurring_dates(START, rule)

        assert len(dates) == SAFETY_MAX_OCCURRENCES
        assert "safety limit" in caplog.text

    def test_count_equal_to_safety_cap_is_not_a_warning(self, caplog):
        rule = RecurrenceRule(frequency="daily", termination_count=SAFETY_MAX_OCCURRENCES)

        with caplog.at_level(logging.WARNING):
            dates = generate_recurring_dates(START, rule)

        assert len(dates) == SAFETY_MAX_OCCURRENCES
        assert "safety limit" not in caplog.text

    @pytest.mark.parametrize(
        "rule",
        [
            RecurrenceRule(frequency="daily", interval=2, termination_count=20),
            RecurrenceRule(frequency="weekly", weekdays=[0, 2, 4, 6], termination_count=20),
            RecurrenceRule(frequency="weekly", interval=3, weekdays=[1, 5], termination_count=20),
            RecurrenceRule(frequency="monthly", termination_count=20),
        ],
    )
    def test_occurrences_are_chronological_and_within_count(self, rule):
        dates = generate_recurring_dates(START, rule)

        assert 0 < len(dates) <= rule.termination_count
        assert dates == sorted(dates)
        assert all(d.time() == START.time() for d in dates)

    def test_preserves_timezone(self):
        sao_paulo = timezone(timedelta(hours=-3))
        start = datetime(2026, 1, 5, 10, 0, tzinfo=sao_paulo)
        rule = RecurrenceRule(frequency="daily", termination_count=3)

        dates = generate_recurring_dates(start, rule)

        assert all(d.tzinfo is sao_paulo for d in dates)
        assert dates[-1] == datetime(2026, 1, 7, 10, 0, tzinfo=sao_paulo)

    def test_is_restartable(self):
        rule = RecurrenceRule(frequency="weekly", weekdays=[1, 3], termination_count=5)
        assert generate_recurring_dates(START, rule) == generate_recurring_dates(START, rule)


class TestRecurrenceSummary:
    def test_no_repetition(self):
        assert get_recurrence_summary(RecurrenceRule()) == "Does not repeat"

    def test_daily(self):
        assert get_recurrence_summary(RecurrenceRule(frequency="daily")) == "Repeats every day"
        assert (
            get_recurrence_summary(RecurrenceRule(frequency="daily", interval=2))
            == "Repeats every 2 days"
        )

    def test_weekly_with_count(self):
        rule = RecurrenceRule(frequency="weekly", weekdays=[3, 1], termination_count=8)
        assert get_recurrence_summary(rule) == "Repeats every Monday and Wednesday, 8 times"

    def test_biweekly_with_end_date(self):
        rule = RecurrenceRule(
            frequency="weekly", interval=2, weekdays=[5], termination_date=date(2026, 3, 15)
        )
        assert get_recurrence_summary(rule) == "Repeats every 2 weeks on Friday until 2026-03-15"

    def test_monthly(self):
        assert (
            get_recurrence_summary(RecurrenceRule(frequency="monthly", interval=3))
            == "Repeats every 3 months"
        )
