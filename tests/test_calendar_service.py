"""Tests for interval addition and enumeration."""

from datetime import date

import pytest

from pardna.models import Frequency, PeriodType
from pardna.services.calendar_service import (
    add_interval, enumerate_intervals, period_type_for, start_of_unit, to_frequency
)


class TestAddInterval:

    def test_adds_days_weeks_and_months(self):
        start = date(2024, 1, 1)
        assert add_interval(start, Frequency.DAILY, 10) == date(2024, 1, 11)
        assert add_interval(start, Frequency.WEEKLY, 2) == date(2024, 1, 15)
        assert add_interval(start, Frequency.MONTHLY, 3) == date(2024, 4, 1)

    def test_month_end_is_clamped(self):
        assert add_interval(date(2024, 1, 31), Frequency.MONTHLY, 1) == date(2024, 2, 29)
        assert add_interval(date(2023, 1, 31), Frequency.MONTHLY, 1) == date(2023, 2, 28)

    @pytest.mark.parametrize("day", [
        date(2024, 5, 15), date(2023, 12, 1), date(2024, 2, 28), date(2025, 7, 28),
    ])
    def test_month_round_trip(self, day):
        there = add_interval(day, Frequency.MONTHLY, 3)
        assert add_interval(there, Frequency.MONTHLY, -3) == day

    def test_month_round_trip_exception_for_day_31(self):
        there = add_interval(date(2024, 3, 31), Frequency.MONTHLY, 3)
        assert there == date(2024, 6, 30)
        assert add_interval(there, Frequency.MONTHLY, -3) == date(2024, 3, 30)

    def test_accepts_string_frequency_and_defaults_to_monthly(self):
        assert add_interval(date(2024, 1, 1), 'weekly', 1) == date(2024, 1, 8)
        assert add_interval(date(2024, 1, 1), None, 1) == date(2024, 2, 1)


class TestEnumerateIntervals:

    def test_daily_boundaries(self):
        assert enumerate_intervals(date(2024, 1, 1), date(2024, 1, 4), Frequency.DAILY) == [
            date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4),
        ]

    def test_weekly_boundaries_start_on_sunday(self):
        # 2024-01-01 is a Monday
        boundaries = enumerate_intervals(date(2024, 1, 1), date(2024, 1, 29), Frequency.WEEKLY)
        assert boundaries == [
            date(2023, 12, 31), date(2024, 1, 7), date(2024, 1, 14),
            date(2024, 1, 21), date(2024, 1, 28),
        ]
        assert all(b.weekday() == 6 for b in boundaries)

    def test_monthly_boundaries_are_first_of_month(self):
        boundaries = enumerate_intervals(date(2024, 1, 15), date(2024, 4, 15), Frequency.MONTHLY)
        assert boundaries == [
            date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1), date(2024, 4, 1),
        ]

    def test_empty_when_end_before_start(self):
        assert enumerate_intervals(date(2024, 2, 1), date(2024, 1, 1), Frequency.DAILY) == []

    def test_restartable(self):
        start, end = date(2024, 1, 1), date(2024, 6, 1)
        assert enumerate_intervals(start, end, Frequency.MONTHLY) == \
            enumerate_intervals(start, end, Frequency.MONTHLY)

    @pytest.mark.parametrize("frequency", list(Frequency))
    @pytest.mark.parametrize("start", [
        date(2024, 1, 1), date(2024, 1, 31), date(2024, 2, 29), date(2023, 12, 30),
    ])
    def test_covers_every_period_index(self, frequency, start):
        for duration in range(0, 15):
            end = add_interval(start, frequency, duration)
            assert len(enumerate_intervals(start, end, frequency)) >= duration + 1


def test_start_of_unit():
    assert start_of_unit(date(2024, 1, 3), Frequency.WEEKLY) == date(2023, 12, 31)
    assert start_of_unit(date(2024, 1, 7), Frequency.WEEKLY) == date(2024, 1, 7)
    assert start_of_unit(date(2024, 1, 17), Frequency.MONTHLY) == date(2024, 1, 1)


def test_period_type_for():
    assert period_type_for(Frequency.DAILY) == PeriodType.DAY
    assert period_type_for('WEEKLY') == PeriodType.WEEK
    assert period_type_for(None) == PeriodType.MONTH


def test_to_frequency_falls_back_to_monthly():
    assert to_frequency('FORTNIGHTLY') == Frequency.MONTHLY
