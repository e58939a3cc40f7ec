"""Crash records keyed by flake IDs.

Each record's id is a freshly generated flake ID, so the crash time can be
recovered from the id alone as long as the recorded layout is used.
"""

import json
import os
import sys
import traceback
import uuid

from core.errors import EntropyUnavailable
from flake.codec import get_codec
from internal.logging import get_logger
from utils.timestamp import format_timestamp

# Default crash log path, can be overridden by configure()
_crash_log = "logs/crash.log"


def configure(crash_file):
    """Set crash log file path from config."""
    global _crash_log
    _crash_log = crash_file


def crash_record(exc_type, exc_value, exc_tb, codec=None):
    codec = codec or get_codec()
    layout = codec.layout
    try:
        identifier = codec.generate()
    except EntropyUnavailable:
        crash_id, timestamp_ms = uuid.uuid4().hex, codec.now_ms()
    else:
        crash_id = codec.to_string(identifier)
        timestamp_ms = codec.decompose(identifier)[0]
    return {
        "id": crash_id,
        "timestamp": format_timestamp(timestamp_ms),
        "timestamp_ms": timestamp_ms,
        "layout": layout.to_dict(),
        "type": exc_type.__name__ if exc_type else "Unknown",
        "msg": str(exc_value) if exc_value else "",
        "traceback": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
    }


def _write_crash(record):
    """Append a crash record as one JSON line. Never raises."""
    try:
        log_dir = os.path.dirname(_crash_log)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        with open(_crash_log, "a") as f:
            f.write(json.dumps(record) + "\n")
    except OSError as exc:
        get_logger().bind(component="crash").warn("crash log not written", error=exc, path=_crash_log)


def log_crash(exc_type, exc_value, exc_tb):
    """sys.excepthook: log to stderr and append to the crash file."""
    record = crash_record(exc_type, exc_value, exc_tb)
    get_logger().bind(component="crash").error(
        "unhandled exception", error=record["msg"], crash_id=record["id"], type=record["type"])
    sys.stderr.write(record["traceback"])
    _write_crash(record)


def install_crash_handler():
    """Install global sync exception handler."""
    sys.excepthook = log_crash
