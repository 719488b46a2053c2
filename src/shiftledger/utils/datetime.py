# File: src/shiftledger/utils/datetime.py
"""UTC datetime helpers. Every ledger timestamp is stored as naive UTC."""

from datetime import datetime, timezone

# Start of time for a ledger that has never been closed
EPOCH = datetime(1970, 1, 1)


def now_utc() -> datetime:
    """Get current UTC datetime as NAIVE for storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_iso_z(value: datetime) -> str:
    """Render a naive UTC datetime as ISO-8601 with a Z suffix."""
    return as_naive_utc(value).isoformat(timespec="microseconds") + "Z"
