from datetime import date, datetime, timedelta, timezone

from app.utils.time import coerce_date, coerce_datetime, epoch_ms, iso_utc, resolve_timezone, utc_now


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
    assert dt.utcoffset() == timedelta(0)

    time_diff = utc_now() - dt
    assert isinstance(time_diff, timedelta)


def test_coerce_datetime_epoch_seconds_and_millis():
    expected = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)
    assert coerce_datetime(int(expected.timestamp())) == expected
    assert coerce_datetime(int(expected.timestamp()) * 1000) == expected


def test_coerce_datetime_rejects_garbage():
    assert coerce_datetime("yesterday") is None
    assert coerce_datetime(True) is None
    assert coerce_datetime(None) is None


def test_iso_utc_is_second_precision():
    dt = datetime(2026, 3, 14, 11, 0, 5, 123456, tzinfo=timezone(timedelta(hours=1)))
    assert iso_utc(dt) == "2026-03-14T10:00:05+00:00"
    assert iso_utc(datetime(2026, 3, 14, 10, 0)) == "2026-03-14T10:00:00+00:00"


def test_epoch_ms():
    assert epoch_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000


def test_coerce_date():
    assert coerce_date("2026-03-14T10:00:00Z") == "2026-03-14"
    assert coerce_date(date(2026, 3, 14)) == "2026-03-14"
    assert coerce_date("") is None
    assert coerce_date("14/03/2026") is None


def test_resolve_timezone_falls_back_to_utc():
    assert resolve_timezone(None) is timezone.utc
    assert resolve_timezone("Not/AZone") is timezone.utc
