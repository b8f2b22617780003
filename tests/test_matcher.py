"""Tests for birthday_wisher.greetings.matcher."""

import datetime

import pytest

from birthday_wisher.greetings.matcher import is_birthday


def d(value: str) -> datetime.date:
    return datetime.date.fromisoformat(value)


class TestMonthDayMatch:
    """Month and day decide; the year never matters."""

    @pytest.mark.parametrize(
        "reference, dob",
        [
            ("2024-03-14", "1990-03-14"),
            ("2025-12-31", "1970-12-31"),
            ("2024-01-01", "2000-01-01"),
            ("2024-03-14", "2024-03-14"),
        ],
    )
    def test_matching_month_and_day(self, reference, dob):
        assert is_birthday(d(reference), d(dob)) is True

    @pytest.mark.parametrize(
        "reference, dob",
        [
            ("2024-03-15", "1990-03-14"),
            ("2024-04-14", "1990-03-14"),
            ("2024-02-28", "1990-03-01"),
        ],
    )
    def test_different_month_or_day(self, reference, dob):
        assert is_birthday(d(reference), d(dob)) is False

    def test_datetime_reference_is_reduced_to_date(self):
        reference = datetime.datetime(2024, 3, 14, 23, 59)
        assert is_birthday(reference, d("1990-03-14")) is True


class TestLeapDayPolicy:
    """People born on Feb 29 are greeted on Feb 28 in non-leap years."""

    def test_feb_29_in_leap_year(self):
        assert is_birthday(d("2024-02-29"), d("2000-02-29")) is True

    def test_feb_28_in_leap_year_does_not_match(self):
        assert is_birthday(d("2024-02-28"), d("2000-02-29")) is False

    def test_feb_28_in_non_leap_year_matches(self):
        assert is_birthday(d("2023-02-28"), d("2000-02-29")) is True

    def test_march_1_in_non_leap_year_does_not_match(self):
        assert is_birthday(d("2023-03-01"), d("2000-02-29")) is False

    def test_century_non_leap_year(self):
        # 2100 is not a leap year.
        assert is_birthday(d("2100-02-28"), d("2000-02-29")) is True

    def test_feb_28_birthday_unaffected(self):
        assert is_birthday(d("2023-02-28"), d("1999-02-28")) is True
        assert is_birthday(d("2024-02-29"), d("1999-02-28")) is False
