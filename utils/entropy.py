"""Cryptographically secure random integers for identifier generation."""

import secrets

from core.errors import EntropyUnavailable


def random_below_or_equal(bound):
    """Uniform random integer in the closed range [0, bound].

    Draws from the OS CSPRNG via ``secrets``; failures of the underlying
    source surface as EntropyUnavailable.
    """
    if isinstance(bound, bool) or not isinstance(bound, int) or bound < 0:
        raise ValueError(f"bound must be a non-negative integer, got {bound!r}")
    try:
        return secrets.randbelow(bound + 1)
    except (OSError, NotImplementedError) as exc:
        raise EntropyUnavailable("random source unavailable", bound=bound, cause=exc) from exc
