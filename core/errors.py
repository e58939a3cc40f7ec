"""Custom errors with tracking IDs."""

import uuid

from utils.timestamp import format_timestamp


class BaseFlakeError(Exception):
    """Base error with unique ID and timestamp for tracking."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.message = message
        self.error_id = uuid.uuid4().hex
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause

    def __str__(self):
        return f"[{self.error_id}] {super().__str__()}"

    def to_dict(self):
        record = {
            "error": type(self).__name__,
            "error_id": self.error_id,
            "timestamp": self.timestamp,
            "msg": self.message,
            "context": self.context,
        }
        if self.cause is not None:
            record["cause"] = str(self.cause)
        return record


class EntropyUnavailable(BaseFlakeError):
    """The random source could not supply randomness."""

    def __init__(self, message, bound=None, **kwargs):
        context = kwargs.pop("context", {})
        if bound is not None:
            context["bound"] = bound
        super().__init__(message, context=context, **kwargs)


class InvalidPrecision(BaseFlakeError, ValueError):
    """Timestamp bit width outside [1, 63]."""

    def __init__(self, message, bits=None, **kwargs):
        context = kwargs.pop("context", {})
        if bits is not None:
            context["bits"] = repr(bits)
        super().__init__(message, context=context, **kwargs)


class ParseError(BaseFlakeError, ValueError):
    """Text is not an unsigned 64-bit decimal numeral."""

    def __init__(self, message, text=None, **kwargs):
        context = kwargs.pop("context", {})
        if text is not None:
            context["text"] = text if isinstance(text, str) else repr(text)
        super().__init__(message, context=context, **kwargs)


class FormatError(BaseFlakeError, TypeError):
    """JSON value is neither a number nor a string."""

    def __init__(self, message="expected a string or an integer", value_type=None, **kwargs):
        context = kwargs.pop("context", {})
        if value_type:
            context["value_type"] = value_type
        super().__init__(message, context=context, **kwargs)
