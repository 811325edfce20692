from datetime import datetime, timedelta

import pytest

from carwash_crm.errors import ValidationError
from carwash_crm.intervals import appointment_window, overlaps, parse_date, parse_datetime

T0 = datetime(2024, 1, 1, 10, 0)
HOUR = timedelta(hours=1)


@pytest.mark.parametrize("a, b", [
    ((T0, T0 + HOUR), (T0 + HOUR / 2, T0 + HOUR * 1.5)),
    ((T0, T0 + HOUR), (T0 + HOUR, T0 + HOUR * 2)),
    ((T0, T0 + HOUR * 3), (T0 + HOUR, T0 + HOUR * 2)),
    ((T0, T0 + HOUR), (T0 - HOUR * 2, T0 - HOUR)),
    ((T0, T0 + HOUR), (T0, T0 + HOUR)),
])
def test_overlaps_is_symmetric(a, b):
    assert overlaps(*a, *b) == overlaps(*b, *a)


def test_overlap_partial():
    assert overlaps(T0, T0 + HOUR, T0 + HOUR / 2, T0 + HOUR * 1.5)


def test_touching_intervals_do_not_overlap():
    assert not overlaps(T0, T0 + HOUR, T0 + HOUR, T0 + HOUR * 2)
    assert not overlaps(T0 - HOUR, T0, T0, T0 + HOUR)


def test_appointment_window_is_one_hour():
    assert appointment_window(T0) == (T0, T0 + HOUR)


def test_parse_datetime_converts_utc_to_local_time():
    # По умолчанию UTC+3
    assert parse_datetime("2024-01-01T07:00:00Z") == T0
    assert parse_datetime("2024-01-01T10:00") == T0


@pytest.mark.parametrize("raw", ["", "завтра", "2024-13-01T10:00"])
def test_parse_datetime_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_datetime(raw)


def test_parse_date():
    assert parse_date("2024-01-01") == T0.date()
    with pytest.raises(ValidationError):
        parse_date("01.01.2024")
