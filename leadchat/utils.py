"""Shared utilities used across the chat session core."""

from datetime import datetime, timezone

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36.

    Examples:
        >>> to_base36(0)
        '0'
        >>> to_base36(35)
        'z'
        >>> to_base36(1295)
        'zz'
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value} in base 36")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_timestamp(moment: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with millisecond precision.

    Naive datetimes are assumed to already be in UTC.

    Examples:
        >>> to_iso_timestamp(datetime(2025, 3, 15, 10, 0, tzinfo=timezone.utc))
        '2025-03-15T10:00:00.000Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
