from datetime import UTC, datetime, timedelta, timezone

from billing_backend.app.core.time import as_utc, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_as_utc_treats_naive_values_as_utc():
    naive = datetime(2030, 1, 31, 23, 30)
    assert as_utc(naive) == datetime(2030, 1, 31, 23, 30, tzinfo=UTC)


def test_as_utc_converts_other_offsets():
    ist = timezone(timedelta(hours=5, minutes=30))
    value = datetime(2030, 2, 1, 2, 0, tzinfo=ist)
    converted = as_utc(value)
    assert converted.tzinfo is UTC
    assert (converted.month, converted.day, converted.hour) == (1, 31, 20)
