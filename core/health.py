"""Health checks for a flake codec.

Checks are plain functions taking the codec and returning a CheckResult.
The headroom check warns before the timestamp field wraps around, which is
the one failure mode of the format that grows silently over time.
"""

import time
from enum import Enum

from utils.timestamp import format_timestamp

DAY_MS = 86_400_000
YEAR_MS = 365 * DAY_MS


class Status(Enum):
    OK = "healthy"
    DEGRADED = "degraded"
    FAIL = "unhealthy"


class CheckResult:
    __slots__ = ("name", "status", "msg", "details")

    def __init__(self, name, status, msg="", details=None):
        self.name = name
        self.status = status
        self.msg = msg
        self.details = details or {}

    def to_dict(self):
        record = {"name": self.name, "status": self.status.value, "msg": self.msg}
        if self.details:
            record["details"] = self.details
        return record


class HealthReport:
    __slots__ = ("status", "checks", "layout", "uptime", "timestamp")

    def __init__(self, status, checks, layout, timestamp_ms, uptime=0):
        self.status = status
        self.checks = checks
        self.layout = layout
        self.uptime = uptime
        self.timestamp = format_timestamp(timestamp_ms)

    def to_dict(self):
        return {"status": self.status.value,
                "timestamp": self.timestamp,
                "uptime": round(self.uptime, 1),
                "layout": {**self.layout.to_dict(), "epoch": format_timestamp(self.layout.epoch_ms)},
                "checks": [check.to_dict() for check in self.checks]}


def overall_status(results):
    """Worst status, where only critical failures count as FAIL."""
    status = Status.OK
    for result, is_critical in results:
        if result.status == Status.FAIL and is_critical:
            return Status.FAIL
        if result.status != Status.OK:
            status = Status.DEGRADED
    return status


class HealthChecker:
    """Runs registered checks against one codec and caches the report."""

    def __init__(self, codec, ttl=1.0):
        self.codec = codec
        self._checks = []
        self._cache = None
        self._cache_time = 0
        self._ttl = ttl
        self._start_time = time.monotonic()

    def register(self, check_fn, critical=True):
        self._checks.append((check_fn, critical))

    def _run(self, check_fn):
        try:
            return check_fn(self.codec)
        except Exception as exc:
            return CheckResult(check_fn.__name__, Status.FAIL, getattr(exc, "message", str(exc)))

    def check(self):
        now = time.monotonic()
        if self._cache is not None and now - self._cache_time < self._ttl:
            return self._cache

        results = [(self._run(check_fn), critical) for check_fn, critical in self._checks]
        self._cache = HealthReport(overall_status(results), [result for result, _ in results],
                                   self.codec.layout, self.codec.now_ms(), now - self._start_time)
        self._cache_time = now
        return self._cache


def check_round_trip(codec, max_skew_ms=1000):
    """Generate an ID and make sure it decodes back to the codec's clock."""
    layout = codec.layout
    before = codec.now_ms()
    timestamp_ms, _ = codec.decompose(codec.generate())
    skew = timestamp_ms - before
    if abs(skew) > max_skew_ms:
        return CheckResult("codec", Status.DEGRADED, f"skew {skew}ms", {"skew_ms": skew})
    return CheckResult("codec", Status.OK, f"{layout.timestamp_bits}/{layout.random_bits}")


def check_headroom(codec, warn_ms=YEAR_MS):
    """Time left before the timestamp field wraps."""
    layout = codec.layout
    elapsed = codec.now_ms() - layout.epoch_ms
    if elapsed < 0:
        return CheckResult("headroom", Status.FAIL, "epoch in the future", {"ahead_ms": -elapsed})

    remaining = layout.wraparound_ms - elapsed
    try:
        wraps_at = format_timestamp(layout.epoch_ms + layout.wraparound_ms)
    except OverflowError:
        wraps_at = None
    details = {"remaining_ms": remaining, "wraps_at": wraps_at}
    if remaining <= 0:
        return CheckResult("headroom", Status.FAIL, "timestamp field wrapped", details)
    if remaining < warn_ms:
        return CheckResult("headroom", Status.DEGRADED, f"wraps in {remaining // DAY_MS}d", details)
    return CheckResult("headroom", Status.OK, f"{remaining // YEAR_MS}y", details)
