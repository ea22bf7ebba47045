from datetime import datetime, timedelta, timezone

from tractorhire.utils.time_helpers import (
    ensure_utc,
    isoformat_or_none,
    minutes_between,
    utc_now,
    whole_hours,
)


class TestEnsureUtc:
    def test_naive_value_is_taken_as_utc(self):
        value = ensure_utc(datetime(2025, 6, 2, 10, 0))
        assert value.tzinfo == timezone.utc
        assert value.hour == 10

    def test_offset_value_is_converted(self):
        kathmandu = timezone(timedelta(hours=5, minutes=45))
        value = ensure_utc(datetime(2025, 6, 2, 15, 45, tzinfo=kathmandu))
        assert value == datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc)
        assert value.tzinfo == timezone.utc


def test_utc_now_is_aware():
    assert utc_now().tzinfo == timezone.utc


class TestMinutesBetween:
    def test_truncates_partial_minutes(self):
        start = datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc)
        assert minutes_between(start, start + timedelta(minutes=20, seconds=59)) == 20

    def test_negative_span_truncates_toward_zero(self):
        start = datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc)
        assert minutes_between(start, start - timedelta(minutes=5, seconds=30)) == -5

    def test_mixed_naive_and_aware(self):
        start = datetime(2025, 6, 2, 10, 0)
        end = datetime(2025, 6, 2, 11, 0, tzinfo=timezone.utc)
        assert minutes_between(start, end) == 60


def test_whole_hours_truncates():
    assert whole_hours(119) == 1
    assert whole_hours(120) == 2
    assert whole_hours(59) == 0


def test_isoformat_or_none():
    assert isoformat_or_none(None) is None
    assert isoformat_or_none(datetime(2025, 6, 2, 10, 0)) == "2025-06-02T10:00:00+00:00"
