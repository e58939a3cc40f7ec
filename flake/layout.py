"""Bit layout of a 64-bit flake identifier.

Layout, high to low bits:
    timestamp_bits: milliseconds since the layout epoch (default 41)
    random_bits:    64 - timestamp_bits of CSPRNG output (default 23)

Identifiers carry no version tag. They only decode correctly under the
epoch and bit split that produced them; 2000-01-01 / 41 bits is the
wire-compatible default. The timestamp field wraps silently after
2^timestamp_bits milliseconds from the epoch (about 69.7 years at 41 bits).
"""

from core.errors import InvalidPrecision

ID_BITS = 64
MAX_ID = (1 << ID_BITS) - 1

# 2000-01-01T00:00:00Z in milliseconds since Unix epoch
DEFAULT_EPOCH_MS = 946684800000
DEFAULT_TIMESTAMP_BITS = 41


def extract_bits(data, shift, length):
    """Return ``length`` bits of ``data`` starting at bit ``shift``."""
    bitmask = ((1 << length) - 1) << shift
    return (data & bitmask) >> shift


def validate_precision(bits):
    if isinstance(bits, bool) or not isinstance(bits, int):
        raise InvalidPrecision(f"timestamp bits must be an integer, got {type(bits).__name__}", bits=bits)
    if not 1 <= bits <= ID_BITS - 1:
        raise InvalidPrecision(f"timestamp bits must be in [1, {ID_BITS - 1}], got {bits}", bits=bits)
    return bits


class FlakeLayout:
    """Immutable epoch and bit-width split shared by encoder and decoder."""

    __slots__ = ("_epoch_ms", "_timestamp_bits")

    def __init__(self, epoch_ms=DEFAULT_EPOCH_MS, timestamp_bits=DEFAULT_TIMESTAMP_BITS):
        object.__setattr__(self, "_epoch_ms", int(epoch_ms))
        object.__setattr__(self, "_timestamp_bits", validate_precision(timestamp_bits))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def epoch_ms(self):
        return self._epoch_ms

    @property
    def timestamp_bits(self):
        return self._timestamp_bits

    @property
    def random_bits(self):
        return ID_BITS - self._timestamp_bits

    @property
    def timestamp_mask(self):
        return (1 << self._timestamp_bits) - 1

    @property
    def random_mask(self):
        return (1 << self.random_bits) - 1

    @property
    def max_random(self):
        """Largest value the random field can hold."""
        return self.random_mask

    @property
    def wraparound_ms(self):
        """Milliseconds after the epoch at which the timestamp field wraps."""
        return 1 << self._timestamp_bits

    def replace(self, epoch_ms=None, timestamp_bits=None):
        return FlakeLayout(
            self._epoch_ms if epoch_ms is None else epoch_ms,
            self._timestamp_bits if timestamp_bits is None else timestamp_bits,
        )

    def to_dict(self):
        return {
            "epoch_ms": self._epoch_ms,
            "timestamp_bits": self._timestamp_bits,
            "random_bits": self.random_bits,
            "wraparound_ms": self.wraparound_ms,
        }

    def __eq__(self, other):
        if not isinstance(other, FlakeLayout):
            return NotImplemented
        return (self._epoch_ms, self._timestamp_bits) == (other._epoch_ms, other._timestamp_bits)

    def __hash__(self):
        return hash((self._epoch_ms, self._timestamp_bits))

    def __repr__(self):
        return f"FlakeLayout(epoch_ms={self._epoch_ms}, timestamp_bits={self._timestamp_bits})"
