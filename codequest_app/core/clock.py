"""Single time source for the services.

All timestamps are stored as naive UTC. Tests pin the time by setting the
``CLOCK`` config key to a callable.
"""

from datetime import datetime, timezone
from typing import Optional

from flask import current_app, has_app_context


def now() -> datetime:
    """Return the current time as a naive UTC datetime."""
    if has_app_context():
        clock = current_app.config.get('CLOCK')
        if clock is not None:
            return to_naive_utc(clock())
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO 8601 string (or pass through a datetime) into naive UTC."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        return to_naive_utc(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported datetime value: {value!r}")
