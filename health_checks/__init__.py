"""Replica set member health checks."""

from datetime import datetime, timezone
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """pymongo returns naive UTC datetimes unless the client is tz aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utc_now(now: Optional[datetime] = None) -> datetime:
    return as_utc(now) if now is not None else datetime.now(timezone.utc)
