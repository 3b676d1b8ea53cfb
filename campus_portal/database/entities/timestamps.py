"""Timestamp coercion shared by the ORM entities (ISO-8601 strings ⇄ aware datetimes)."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time, timezone-aware (UTC)."""
    return datetime.now(timezone.utc)


def to_datetime(value) -> datetime | None:
    """
    Accept a `datetime` or an ISO-8601 string and return an aware datetime.

    Naive values are assumed to be UTC. `None` passes through.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def to_iso(value) -> str | None:
    """Serialize a stored timestamp for the JSON wire format."""
    value = to_datetime(value)
    return value.isoformat() if value is not None else None
