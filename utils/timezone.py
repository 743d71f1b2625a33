"""UTC-everywhere time handling. Stripe speaks unix seconds; we speak aware datetimes."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current time in UTC. Use this instead of datetime.now() everywhere."""
    return datetime.now(timezone.utc)


def from_unix(timestamp: int | None) -> datetime | None:
    """
    Convert a Stripe unix timestamp (seconds) to an aware UTC datetime.

    None passes through so optional fields like last_send_at stay optional.
    """
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def to_unix(dt: datetime) -> int:
    """
    Convert an aware datetime to Stripe unix seconds.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to a unix timestamp. Datetime must be timezone-aware."
        )
    return int(dt.timestamp())
