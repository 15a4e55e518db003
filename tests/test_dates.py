from datetime import date, datetime

import pytest

from app.utils.dates import (
    days_in_month,
    format_form_datetime,
    format_group_title,
    month_bounds,
    parse_form_datetime,
)


def test_parse_canonical_and_fallback_formats():
    assert parse_form_datetime("2026-01-09T12:00:05") == datetime(2026, 1, 9, 12, 0, 5)
    assert parse_form_datetime(" 2026-01-09T12:30 ") == datetime(2026, 1, 9, 12, 30)


@pytest.mark.parametrize("value", ["", "yesterday", "2026-01-09", "09/01/2026 12:00"])
def test_parse_rejects_other_formats(value):
    with pytest.raises(ValueError):
        parse_form_datetime(value)


def test_format_uses_canonical_format():
    assert format_form_datetime(datetime(2026, 1, 9, 7, 5)) == "2026-01-09T07:05:00"


def test_month_bounds_december():
    assert month_bounds(2025, 12) == (datetime(2025, 12, 1), datetime(2026, 1, 1))


def test_days_in_month_leap_year():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2026, 2) == 28


def test_group_titles():
    today = date(2026, 1, 10)
    assert format_group_title(date(2026, 1, 10), today) == "TODAY"
    assert format_group_title(date(2026, 1, 9), today) == "YESTERDAY"
    assert format_group_title(date(2026, 1, 2), today) == "FRI, 02 JAN '26"
