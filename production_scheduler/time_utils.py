# Timestamp <-> minute-offset conversion.
# Version: 1.0.0
# All engine times are whole minutes from the horizon start.

from datetime import datetime, timedelta, timezone

ONE_MINUTE = timedelta(minutes=1)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp.

    Args:
        value: ISO string (a trailing ``Z`` is accepted) or datetime.

    Returns:
        Aware UTC datetime.

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def to_minute_offset(instant: str | datetime, origin: str | datetime) -> int:
    """Whole minutes from ``origin`` to ``instant``, floored.

    Instants before the origin give negative offsets.
    """
    delta = parse_timestamp(instant) - parse_timestamp(origin)
    return delta // ONE_MINUTE


def from_minute_offset(minutes: int, origin: str | datetime) -> datetime:
    """Absolute instant ``minutes`` after ``origin``."""
    return parse_timestamp(origin) + timedelta(minutes=minutes)


def format_timestamp(value: datetime) -> str:
    """Format as UTC ISO-8601 with seconds precision and a ``Z`` suffix."""
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")
