from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, truncated toward zero."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return int(seconds // 60) if seconds >= 0 else -int(-seconds // 60)


def whole_hours(minutes: int) -> int:
    return minutes // 60


def isoformat_or_none(value):
    return ensure_utc(value).isoformat() if value is not None else None
