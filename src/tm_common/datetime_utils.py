"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def to_millis(dt: datetime) -> int:
    """Epoch milliseconds for an aware datetime."""
    return int(dt.timestamp() * 1000)


def parse_timestamp(value: object) -> datetime | None:
    """Coerce a stored timestamp into an aware datetime.

    Accepts datetimes, ISO-8601 strings and epoch milliseconds (the shapes a
    JSONB player state or an event snapshot can carry). Returns None for
    None and for anything unparseable or out of range.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None
