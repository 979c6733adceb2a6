"""Unit tests for date-only helpers"""

import pytest
from datetime import date, datetime, timedelta, timezone
from office_ledger.utils.date_utils import add_months, format_date_br, month_bounds, normalize_date_only


def test_normalize_iso_string():
    assert normalize_date_only("2024-03-05") == date(2024, 3, 5)
    assert normalize_date_only("2024-03-05T10:00:00Z") == date(2024, 3, 5)
    assert normalize_date_only("2024-03-05T23:59:00-03:00") == date(2024, 3, 6)


def test_string_and_datetime_for_same_instant_agree():
    instant = datetime(2024, 1, 15, 23, 30, tzinfo=timezone(timedelta(hours=-3)))

    assert normalize_date_only("2024-01-15T23:30:00-03:00") == normalize_date_only(instant)
    assert normalize_date_only(instant) == date(2024, 1, 16)


def test_normalize_aware_datetime_converts_to_utc():
    late_evening = datetime(2024, 3, 5, 22, 30, tzinfo=timezone(timedelta(hours=-3)))
    assert normalize_date_only(late_evening) == date(2024, 3, 6)


def test_normalize_passes_dates_through():
    assert normalize_date_only(date(2024, 3, 5)) == date(2024, 3, 5)


@pytest.mark.parametrize("value", ["05/03/2024", "", "2024-02-30", 20240305])
def test_normalize_rejects_other_inputs(value):
    with pytest.raises(ValueError):
        normalize_date_only(value)


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))


def test_format_date_br():
    assert format_date_br(date(2024, 3, 5)) == "05/03/2024"
