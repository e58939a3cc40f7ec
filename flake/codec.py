"""Flake ID codec - 64-bit roughly time-ordered unique identifiers.

An identifier is ``(ms_since_epoch << random_bits) | random`` packed into an
unsigned 64-bit integer. Uniqueness is probabilistic: there is no sequence
counter and no node id, only CSPRNG bits in the low field.

Identifiers travel as unsigned decimal strings, and as JSON strings rather
than JSON numbers so that double-precision parsers do not round them.
"""

import json
import re
import threading
from datetime import datetime

from core.errors import FormatError, ParseError
from flake.layout import FlakeLayout, MAX_ID, extract_bits, validate_precision
from internal.logging import get_logger
from utils.entropy import random_below_or_equal
from utils.timestamp import (
    NANOS_PER_MILLI,
    datetime_to_nanos,
    format_timestamp,
    millis_to_datetime,
    now_nanos,
)

_DECIMAL = re.compile(r"[0-9]+")
_JSON_WHITESPACE = " \t\n\r"


class IdCodec:
    """Builds, generates and decomposes flake IDs under one layout.

    The layout is an immutable snapshot. ``configure`` swaps it under a lock,
    and every operation reads it exactly once.
    """

    def __init__(self, layout=None, clock=now_nanos, entropy=random_below_or_equal):
        self._layout = layout or FlakeLayout()
        self._lock = threading.Lock()
        self._clock = clock
        self._entropy = entropy

    @property
    def layout(self):
        return self._layout

    def with_layout(self, epoch_ms=None, timestamp_bits=None):
        """Independent codec sharing this one's clock and entropy."""
        return IdCodec(self._layout.replace(epoch_ms, timestamp_bits), self._clock, self._entropy)

    def now_ms(self):
        """Milliseconds since 1970 according to this codec's clock."""
        return self._clock() // NANOS_PER_MILLI

    # Configuration

    @staticmethod
    def _epoch_millis(time_point):
        if isinstance(time_point, datetime):
            return datetime_to_nanos(time_point) // NANOS_PER_MILLI
        if isinstance(time_point, int) and not isinstance(time_point, bool):
            return time_point // NANOS_PER_MILLI
        raise TypeError(f"epoch must be a datetime or integer nanoseconds, got {type(time_point).__name__}")

    def configure(self, epoch=None, timestamp_bits=None):
        """Replace epoch and/or precision in one atomic swap."""
        epoch_ms = None if epoch is None else self._epoch_millis(epoch)
        if timestamp_bits is not None:
            validate_precision(timestamp_bits)
        with self._lock:
            self._layout = self._layout.replace(epoch_ms, timestamp_bits)
            layout = self._layout
        get_logger().bind(component="codec").info(
            "flake layout set", epoch=format_timestamp(layout.epoch_ms), **layout.to_dict())
        return layout

    def set_epoch(self, time_point):
        """Measure timestamps from ``time_point`` (datetime or ns since 1970)."""
        if time_point is None:
            raise TypeError("epoch must be a datetime or integer nanoseconds, got NoneType")
        return self.configure(epoch=time_point)

    def set_precision(self, bits):
        """Use ``bits`` timestamp bits and ``64 - bits`` random bits."""
        validate_precision(bits)
        return self.configure(timestamp_bits=bits)

    # Bit packing

    def build(self, timestamp, random, layout=None):
        layout = layout or self._layout
        return ((timestamp & layout.timestamp_mask) << layout.random_bits) | (random & layout.random_mask)

    def generate(self):
        layout = self._layout
        relative_ts = self.now_ms() - layout.epoch_ms
        seq = self._entropy(layout.max_random)
        return self.build(relative_ts, seq, layout)

    def decompose(self, identifier):
        """Return ``(absolute_timestamp_ms, random)`` for an identifier."""
        layout = self._layout
        return (
            extract_bits(identifier, layout.random_bits, layout.timestamp_bits) + layout.epoch_ms,
            extract_bits(identifier, 0, layout.random_bits),
        )

    def timestamp_datetime(self, identifier):
        return millis_to_datetime(self.decompose(identifier)[0])

    def describe(self, identifier):
        timestamp_ms, random = self.decompose(identifier)
        try:
            timestamp = format_timestamp(timestamp_ms)
        except OverflowError:
            timestamp = None
        return {
            "id": self.to_string(identifier),
            "timestamp_ms": timestamp_ms,
            "timestamp": timestamp,
            "random": random,
        }

    # Text and JSON

    @staticmethod
    def to_string(identifier):
        if isinstance(identifier, bool) or not isinstance(identifier, int) or not 0 <= identifier <= MAX_ID:
            raise ParseError("identifier is not an unsigned 64-bit integer", text=identifier)
        return str(identifier)

    @staticmethod
    def from_string(text):
        if not isinstance(text, str):
            raise ParseError(f"expected str, got {type(text).__name__}", text=text)
        try:
            value = int(text, 10)
        except ValueError as exc:
            raise ParseError(f"invalid unsigned decimal {text!r}", text=text, cause=exc) from exc
        # int() also takes signs, whitespace, underscores and non-ASCII digits
        if not _DECIMAL.fullmatch(text):
            raise ParseError(f"invalid unsigned decimal {text!r}", text=text)
        if value > MAX_ID:
            raise ParseError(f"value out of range {text!r}", text=text)
        return value

    @classmethod
    def to_json(cls, identifier):
        return json.dumps(cls.to_string(identifier))

    @classmethod
    def from_json(cls, document):
        """Decode JSON text holding an identifier as a string or a number."""
        try:
            value = json.loads(document)
        except (TypeError, ValueError) as exc:
            raise FormatError(cause=exc, value_type=type(document).__name__) from exc
        return cls.from_json_value(value)

    @classmethod
    def from_json_value(cls, value):
        """Decode an already-parsed JSON value."""
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_ID:
            return value
        if isinstance(value, str):
            # string contents are read as a JSON integer literal
            text = value.strip(_JSON_WHITESPACE)
            if len(text) > 1 and text.startswith("0"):
                raise ParseError(f"leading zero in JSON integer {value!r}", text=value)
            return cls.from_string(text)
        raise FormatError(value_type=type(value).__name__)


_codec = IdCodec()


def get_codec():
    return _codec


def build(timestamp, random):
    return _codec.build(timestamp, random)


def generate():
    return _codec.generate()


def decompose(identifier):
    return _codec.decompose(identifier)


def describe(identifier):
    return _codec.describe(identifier)


def configure(epoch=None, timestamp_bits=None):
    return _codec.configure(epoch, timestamp_bits)


def set_epoch(time_point):
    return _codec.set_epoch(time_point)


def set_precision(bits):
    return _codec.set_precision(bits)


to_string = IdCodec.to_string
from_string = IdCodec.from_string
to_json = IdCodec.to_json
from_json = IdCodec.from_json
from_json_value = IdCodec.from_json_value
