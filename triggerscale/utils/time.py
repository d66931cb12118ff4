"""Manages all time-related operations."""

import time
from datetime import datetime, timezone

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

def monotonic():
    """Returns seconds from a monotonic clock, used for cooldown bookkeeping."""

    return time.monotonic()

def get_timestamp(utc=True):
    """Returns the current timestamp, either UTC or local."""

    return datetime.now(timezone.utc) if utc else datetime.now()

def format_timestamp(date=None, utc=True, format=DATETIME_FORMAT):
    """Formats a datetime object as a string."""

    date = date or get_timestamp(utc)
    return date.strftime(format)

