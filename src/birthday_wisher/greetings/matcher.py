"""Decide whether a reference date is an employee's birthday.

Only month and day are compared.  People born on February 29 are greeted
on February 28 in non-leap years; March 1 never matches them.
"""

import calendar
import datetime


def _as_date(value: datetime.date) -> datetime.date:
    """Reduce a ``datetime`` to its calendar date."""
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def is_birthday(
    reference_date: datetime.date,
    date_of_birth: datetime.date,
) -> bool:
    """Return ``True`` if *reference_date* is the birthday for *date_of_birth*.

    Args:
        reference_date: The day being checked (usually today).
        date_of_birth: The employee's date of birth.  The year is ignored.

    Returns:
        ``True`` when month and day match, or when the employee was born
        on February 29 and *reference_date* is February 28 of a non-leap
        year.
    """
    ref = _as_date(reference_date)
    dob = _as_date(date_of_birth)

    if (ref.month, ref.day) == (dob.month, dob.day):
        return True

    if (dob.month, dob.day) == (2, 29) and not calendar.isleap(ref.year):
        return (ref.month, ref.day) == (2, 28)

    return False
