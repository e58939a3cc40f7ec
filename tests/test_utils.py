"""Unit tests for utility modules."""

import json
import sys
from datetime import datetime, timezone

import pytest

from core.errors import EntropyUnavailable, FormatError, ParseError
from flake.codec import IdCodec
from flake.layout import DEFAULT_EPOCH_MS
from conftest import FIXED_NANOS
from internal.logging import LogLevel, StructuredLogger
from utils import entropy
from utils.entropy import random_below_or_equal
from utils.timestamp import (
    datetime_to_nanos,
    format_timestamp,
    millis_to_datetime,
    now_millis,
    now_nanos,
    parse_timestamp,
)


class TestTimestamp:
    """Tests for timestamp utilities."""

    def test_format_timestamp_iso_format(self):
        """Timestamp is ISO 8601 format."""
        ts = format_timestamp()
        assert "T" in ts
        assert ts.endswith("Z")

    def test_format_timestamp_has_milliseconds(self):
        """Timestamp includes milliseconds."""
        assert format_timestamp(946684800123) == "2000-01-01T00:00:00.123Z"

    def test_now_nanos_returns_int(self):
        assert isinstance(now_nanos(), int)

    def test_now_millis_reasonable_value(self):
        """now_millis returns a timestamp after 2020."""
        assert now_millis() > 1577836800000

    def test_datetime_to_nanos(self):
        dt = datetime(2000, 1, 1, 0, 0, 0, 1, tzinfo=timezone.utc)
        assert datetime_to_nanos(dt) == 946684800000001000

    def test_millis_to_datetime(self):
        assert millis_to_datetime(946684800000) == datetime(2000, 1, 1, tzinfo=timezone.utc)

    def test_parse_timestamp_accepts_z(self):
        assert parse_timestamp("2000-01-01T00:00:00Z") == datetime(2000, 1, 1, tzinfo=timezone.utc)

    def test_parse_timestamp_naive_is_utc(self):
        assert parse_timestamp("2020-01-01T00:00:00").tzinfo is not None

    def test_parse_timestamp_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestEntropy:
    """Tests for the CSPRNG wrapper."""

    def test_range_is_closed(self):
        """Bound 0 always yields 0; bound 1 yields both values."""
        assert random_below_or_equal(0) == 0
        assert {random_below_or_equal(1) for _ in range(200)} == {0, 1}

    def test_large_bound(self):
        bound = (1 << 63) - 1
        assert 0 <= random_below_or_equal(bound) <= bound

    @pytest.mark.parametrize("bound", [-1, 1.5, "7", True])
    def test_rejects_bad_bound(self, bound):
        with pytest.raises(ValueError):
            random_below_or_equal(bound)

    def test_source_failure(self, monkeypatch):
        """OS entropy failures become EntropyUnavailable."""
        def broken(n):
            raise OSError("no entropy")

        monkeypatch.setattr(entropy.secrets, "randbelow", broken)
        with pytest.raises(EntropyUnavailable) as info:
            random_below_or_equal(10)
        assert info.value.context["bound"] == 10
        assert isinstance(info.value.cause, OSError)


class TestErrors:
    """Tests for the error taxonomy."""

    def test_error_carries_tracking_fields(self):
        err = ParseError("bad", text="x1")
        assert len(err.error_id) == 32
        assert err.error_id in str(err)
        assert err.to_dict()["context"] == {"text": "x1"}
        assert err.to_dict()["error"] == "ParseError"

    def test_format_error_default_message(self):
        err = FormatError(value_type="bool")
        assert err.message == "expected a string or an integer"
        assert isinstance(err, TypeError)

    def test_parse_error_is_value_error(self):
        assert isinstance(ParseError("bad"), ValueError)


class TestStructuredLogger:
    """Tests for the JSON logger."""

    def test_emits_json_line(self, capsys):
        StructuredLogger(LogLevel.DEBUG).info("hello", id="42")
        record = json.loads(capsys.readouterr().err)
        assert record["msg"] == "hello"
        assert record["level"] == "INFO"
        assert record["id"] == "42"

    def test_filters_below_level(self, capsys):
        StructuredLogger(LogLevel.WARN).info("quiet")
        assert capsys.readouterr().err == ""

    def test_bind_adds_fields(self, capsys):
        StructuredLogger().bind(component="codec").warn("x", error=ValueError("boom"))
        record = json.loads(capsys.readouterr().err)
        assert record["component"] == "codec"
        assert record["err"] == "boom"

    def test_codec_logs_layout_changes(self, capsys):
        """Layout swaps are logged under the codec component."""
        IdCodec().set_precision(40)
        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["component"] == "codec"
        assert record["timestamp_bits"] == 40
        assert record["random_bits"] == 24

    def test_level_parse(self):
        assert LogLevel.parse("warning") == LogLevel.WARN
        assert LogLevel.parse("debug") == LogLevel.DEBUG


class TestCrashHandler:
    """Tests for crash handling utilities."""

    def test_configure_sets_path(self):
        """configure() sets crash log path."""
        from utils import crash
        original = crash._crash_log

        crash.configure("/tmp/test_crash.log")
        assert crash._crash_log == "/tmp/test_crash.log"

        crash.configure(original)

    def test_install_crash_handler(self):
        """install_crash_handler sets sys.excepthook."""
        from utils.crash import install_crash_handler, log_crash

        original_hook = sys.excepthook
        install_crash_handler()

        assert sys.excepthook == log_crash

        sys.excepthook = original_hook

    def test_log_crash_writes_flake_id(self, tmp_path, capsys):
        """Crash records are tagged with a decimal flake ID."""
        from utils import crash
        original = crash._crash_log
        path = tmp_path / "crash.log"
        crash.configure(str(path))
        try:
            try:
                raise RuntimeError("kaboom")
            except RuntimeError:
                crash.log_crash(*sys.exc_info())
        finally:
            crash.configure(original)

        record = json.loads(path.read_text())
        assert record["type"] == "RuntimeError"
        assert record["msg"] == "kaboom"
        assert record["id"].isdigit()
        assert "kaboom" in capsys.readouterr().err

    def test_crash_record_carries_time_and_layout(self, codec):
        """The record id decodes to the recorded crash time."""
        from utils.crash import crash_record

        record = crash_record(ValueError, ValueError("bad"), None, codec=codec)
        assert record["id"] == "103557365767"
        assert record["timestamp_ms"] == DEFAULT_EPOCH_MS + 12345
        assert record["timestamp"] == "2000-01-01T00:00:12.345Z"
        assert record["layout"] == codec.layout.to_dict()
        assert codec.decompose(int(record["id"]))[0] == record["timestamp_ms"]

    def test_crash_record_without_entropy(self):
        """A dead random source falls back to a uuid and the codec clock."""
        from utils.crash import crash_record

        def broken(bound):
            raise EntropyUnavailable("gone", bound=bound)

        codec = IdCodec(clock=lambda: FIXED_NANOS, entropy=broken)
        record = crash_record(None, None, None, codec=codec)
        assert len(record["id"]) == 32
        assert record["timestamp_ms"] == DEFAULT_EPOCH_MS + 12345
        assert record["type"] == "Unknown"
