"""
Date helpers.

Timestamps are stored as naive UTC datetimes (SQLite keeps no offset),
so everything entering the services is normalized here first.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
