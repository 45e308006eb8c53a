"""Date-time helpers shared by services."""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a naive timestamp, matching stored columns."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def expires_after(hours: int, now: datetime | None = None) -> datetime:
    """Return an aware UTC expiry ``hours`` after ``now``."""

    current = now.astimezone(timezone.utc) if now else datetime.now(timezone.utc)
    return current + timedelta(hours=hours)
