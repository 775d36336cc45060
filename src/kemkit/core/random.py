"""Randomness sources for encapsulation.

A randomness source is any callable that takes a byte count and returns that
many bytes, the same shape as :func:`os.urandom` and
:func:`secrets.token_bytes`. Callers that share one source between threads
must make sure it is safe for concurrent use; ``os.urandom`` is.
"""

from __future__ import annotations

import os
from typing import Callable, Optional

from .exceptions import InvalidParameterError


RandomSource = Callable[[int], bytes]


def default_rng() -> RandomSource:
    """Return the default cryptographically secure source."""
    return os.urandom


def resolve_rng(rng: Optional[RandomSource]) -> RandomSource:
    # None means "use the default"; anything else has to at least be callable.
    if rng is None:
        return default_rng()
    if not callable(rng):
        raise InvalidParameterError(f"randomness source must be callable, got {type(rng).__name__}")
    return rng


def read_random(rng: RandomSource, length: int) -> bytes:
    """Draw exactly ``length`` bytes from ``rng``."""
    data = rng(length)
    if len(data) != length:
        raise RuntimeError(f"randomness source returned {len(data)} bytes, expected {length}")
    return bytes(data)
