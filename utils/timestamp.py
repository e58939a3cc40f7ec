"""Wall-clock timestamp utilities."""

import time
from datetime import datetime, timedelta, timezone

NANOS_PER_MILLI = 1_000_000
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_nanos():
    """Current time in nanoseconds since Unix epoch."""
    return time.time_ns()


def now_millis():
    """Current time in milliseconds since Unix epoch."""
    return now_nanos() // NANOS_PER_MILLI


def datetime_to_nanos(dt):
    """Nanoseconds since Unix epoch for a datetime. Naive values are UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - UNIX_EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def millis_to_datetime(epoch_ms):
    """Aware UTC datetime for milliseconds since Unix epoch."""
    return UNIX_EPOCH + timedelta(milliseconds=epoch_ms)


def parse_timestamp(text):
    """Parse ISO 8601 text (a trailing Z is accepted) into an aware datetime."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(epoch_ms=None):
    """Format timestamp as ISO 8601 with milliseconds."""
    if epoch_ms is None:
        epoch_ms = now_millis()

    dt = millis_to_datetime(epoch_ms)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
