"""UTC-everywhere time handling."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def epoch_millis(dt: datetime | None = None) -> int:
    """
    Milliseconds since the Unix epoch.

    Defaults to the current time. Raises ValueError if dt is naive,
    since a naive datetime has no fixed position on the epoch.
    """
    if dt is None:
        dt = now_utc()
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to epoch. Datetime must be timezone-aware."
        )
    return int(dt.timestamp() * 1000)
