from calendar import timegm
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now; every datetime column in the store is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_epoch(value: datetime | None) -> int | None:
    """Unix epoch seconds for a naive UTC (or aware) datetime."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return timegm(value.timetuple())
