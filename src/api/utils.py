from __future__ import annotations

import uuid
from datetime import datetime, timezone


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime read back from storage.

    Some drivers (pymongo without tz_aware, sqlite text round trips of older
    rows) hand back naive values; those are UTC by construction here.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# PUBLIC_INTERFACE
def new_task_id() -> str:
    """Generate a new globally unique task identifier."""
    return str(uuid.uuid4())
