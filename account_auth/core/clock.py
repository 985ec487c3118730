"""Timezone-aware time helpers.

All stored timestamps are UTC. Some drivers (SQLite) hand back naive
datetimes; ensure_utc() restores the zone so comparisons never mix naive
and aware values.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive values are assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
