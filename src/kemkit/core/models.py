"""
Base data models for shared secrets and encapsulation results
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
import hmac

from .exceptions import MissingArgumentError, SecretRangeError


# Label for a key whose bytes carry no algorithm-specific meaning
GENERIC = "Generic"


class SecretKey:
    """A slice of a shared secret, tagged with the algorithm it is meant for.

    The label is opaque to kemkit; it is carried along so the caller can hand
    the key to whatever cipher or MAC it names. Instances are read-only and
    compare in constant time.
    """

    __slots__ = ("_algorithm", "_encoded")

    def __init__(self, encoded: bytes, algorithm: str = GENERIC):
        if algorithm is None:
            raise MissingArgumentError("algorithm must not be None")
        if not encoded:
            raise ValueError("empty key")
        object.__setattr__(self, "_encoded", bytes(encoded))
        object.__setattr__(self, "_algorithm", algorithm)

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def encoded(self) -> bytes:
        return self._encoded

    def __len__(self):
        return len(self._encoded)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self):
        # never print key material
        return f"SecretKey(algorithm={self._algorithm!r}, size={len(self._encoded)})"

    def __eq__(self, other):
        if not isinstance(other, SecretKey):
            return NotImplemented
        return self._algorithm == other._algorithm and hmac.compare_digest(
            self._encoded, other._encoded
        )

    __hash__ = None


@dataclass(frozen=True)
class Encapsulated:
    """Result of one encapsulation: the sliced key, the message for the receiver
    and optional algorithm parameters the receiver may need."""

    key: SecretKey
    encapsulation: bytes
    params: Optional[bytes] = None

    def __repr__(self):
        return (
            f"Encapsulated(key={self.key!r}, encapsulation=<{len(self.encapsulation)} bytes>, "
            f"params={'None' if self.params is None else f'<{len(self.params)} bytes>'})"
        )


def check_range(start: int, end: Optional[int], secret_size: int) -> Tuple[int, int]:
    """Validate a ``[start, end)`` window over a secret of ``secret_size`` bytes.

    ``end=None`` selects up to the end of the secret. Returns the resolved
    ``(start, end)`` pair or raises :class:`SecretRangeError`.
    """
    if start is None:
        raise MissingArgumentError("start must not be None")
    if end is None:
        end = secret_size
    if start < 0 or start > end or end > secret_size:
        raise SecretRangeError(
            f"invalid secret range [{start}, {end}) for a {secret_size}-byte secret"
        )
    return start, end


def slice_secret(secret, start: int, end: int, algorithm: str) -> SecretKey:
    # Project secret[start:end] into a labeled key; the range is assumed checked.
    return SecretKey(bytes(secret[start:end]), algorithm)
