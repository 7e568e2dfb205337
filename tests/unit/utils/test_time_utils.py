from datetime import date, datetime, timedelta, timezone

from app.utils.time import (
    coerce_datetime,
    format_display_date,
    iso_now,
    normalize_date_for_sort,
    to_utc_instant,
    today_iso,
    utc_now,
)


def test_coerce_datetime_parses_z_suffix():
    dt = coerce_datetime("2026-01-01T00:00:00Z")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.isoformat().endswith("+00:00")


def test_coerce_datetime_parses_offset():
    dt = coerce_datetime("2026-01-01T02:00:00+02:00")
    assert dt is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.hour == 0


def test_coerce_datetime_parses_naive_as_utc():
    dt = coerce_datetime("2026-01-01T00:00:00")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)
    assert isinstance(utc_now() - dt, timedelta)


def test_coerce_datetime_rejects_garbage():
    assert coerce_datetime("yesterday") is None
    assert coerce_datetime(42) is None
    assert coerce_datetime(None) is None


def test_iso_now_is_timezone_aware():
    assert iso_now().endswith("+00:00")
    assert coerce_datetime(iso_now(timespec="milliseconds")) is not None


def test_today_iso_matches_utc_date():
    assert today_iso() == utc_now().date().isoformat()


def test_to_utc_instant_has_millisecond_precision():
    dt = datetime(2024, 3, 1, 12, 30, 5, 123456, tzinfo=timezone.utc)
    assert to_utc_instant(dt) == "2024-03-01T12:30:05.123Z"


class TestNormalizeDateForSort:
    def test_plain_date_becomes_midnight(self):
        assert normalize_date_for_sort("2024-03-01") == "2024-03-01T00:00:00"

    def test_date_object(self):
        assert normalize_date_for_sort(date(2024, 3, 1)) == "2024-03-01T00:00:00"

    def test_timestamp_with_offset_is_converted_to_utc(self):
        assert normalize_date_for_sort("2024-03-01T10:00:00+02:00") == "2024-03-01T08:00:00.000Z"

    def test_unparseable_value_is_returned_raw(self):
        assert normalize_date_for_sort("Montag") == "Montag"

    def test_empty_values(self):
        assert normalize_date_for_sort("") == ""
        assert normalize_date_for_sort(None) == ""

    def test_plain_dates_sort_before_later_timestamps(self):
        keys = sorted([normalize_date_for_sort("2024-03-02"), normalize_date_for_sort("2024-03-01T23:00:00Z")])
        assert keys == ["2024-03-01T23:00:00.000Z", "2024-03-02T00:00:00"]


def test_format_display_date():
    assert format_display_date("2024-03-05") == "05.03.2024"
    assert format_display_date("2024-03-05T22:00:00Z") == "05.03.2024"
    assert format_display_date("irgendwann") == "irgendwann"
    assert format_display_date("") == ""
