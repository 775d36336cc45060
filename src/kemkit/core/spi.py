"""
Service provider interface for Key Encapsulation Mechanisms.

A KEM algorithm plugs in by subclassing :class:`KEMSpi` and returning its own
:class:`EncapsulatorSpi` / :class:`DecapsulatorSpi` subclasses. The public
methods here are template methods: they run every argument check once, in a
fixed order, and only then call the algorithm hook. That keeps the error
taxonomy identical across algorithms:

- ``None`` arguments        -> MissingArgumentError
- bad ``[start, end)``      -> SecretRangeError (checked before anything else)
- unsupported combination   -> UnsupportedCombinationError
- wrong message length      -> DecapsulateError

Configuration is pinned when the factory builds an encapsulator or
decapsulator and can't be changed afterwards. Instances hold only read-only
state, so they can be shared between threads without locks.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from .exceptions import (
    DecapsulateError,
    InvalidKeyError,
    MissingArgumentError,
    UnsupportedCombinationError,
)
from .models import GENERIC, Encapsulated, SecretKey, check_range
from .random import RandomSource, resolve_rng


logger = logging.getLogger(__name__)


class _Frozen:
    """Attributes may only be bound through ``_bind`` during ``__init__``."""

    __slots__ = ()

    def _bind(self, **attrs) -> None:
        for name, value in attrs.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")


class _SecretSlicer(_Frozen, ABC):
    __slots__ = ()

    @abstractmethod
    def secret_size(self) -> int:
        """Length in bytes of the full shared secret for this configuration."""

    @abstractmethod
    def encapsulation_size(self) -> int:
        """Length in bytes of every encapsulation message for this configuration."""

    def supports(self, start: int, end: int, algorithm: str) -> bool:
        """Return True if ``(start, end, algorithm)`` can be served.

        The default accepts every non-empty in-range slice with any label.
        Subclasses that only implement the full-range generic case override
        this; the full range with ``"Generic"`` must always stay supported.
        """
        return start < end

    def _check_request(self, start: int, end: Optional[int], algorithm: str):
        if algorithm is None:
            raise MissingArgumentError("algorithm must not be None")
        start, end = check_range(start, end, self.secret_size())
        if not self.supports(start, end, algorithm):
            raise UnsupportedCombinationError(
                f"{type(self).__name__} does not support range [{start}, {end}) "
                f"with algorithm {algorithm!r}"
            )
        return start, end


class EncapsulatorSpi(_SecretSlicer):
    """Sender side, bound to one public key and one parameter choice."""

    __slots__ = ()

    def encapsulate(self, start: int = 0, end: Optional[int] = None, algorithm: str = GENERIC) -> Encapsulated:
        """Generate a fresh shared secret and the message that carries it.

        ``start``/``end`` select the part of the secret returned as the key
        (``end=None`` means the whole secret). Every call draws new
        randomness; two calls never share an ephemeral value.
        """
        start, end = self._check_request(start, end, algorithm)
        return self._encapsulate(start, end, algorithm)

    @abstractmethod
    def _encapsulate(self, start: int, end: int, algorithm: str) -> Encapsulated:
        """Algorithm hook; arguments are already validated."""


class DecapsulatorSpi(_SecretSlicer):
    """Receiver side, bound to one private key and one parameter choice."""

    __slots__ = ()

    def decapsulate(
        self,
        encapsulation: bytes,
        start: int = 0,
        end: Optional[int] = None,
        algorithm: str = GENERIC,
    ) -> SecretKey:
        """Recover the shared secret from ``encapsulation``.

        Deterministic for a given key and message. Any problem with the
        message itself surfaces as a bare :class:`DecapsulateError`.
        """
        if encapsulation is None:
            raise MissingArgumentError("encapsulation must not be None")
        start, end = self._check_request(start, end, algorithm)
        if len(encapsulation) != self.encapsulation_size():
            logger.debug("%s: decapsulation failed", type(self).__name__)
            raise DecapsulateError()
        try:
            return self._decapsulate(bytes(encapsulation), start, end, algorithm)
        except DecapsulateError:
            logger.debug("%s: decapsulation failed", type(self).__name__)
            raise
        except ValueError:
            # crypto backends report malformed input as ValueError; keep the reason private
            logger.debug("%s: decapsulation failed", type(self).__name__)
            raise DecapsulateError() from None

    @abstractmethod
    def _decapsulate(self, encapsulation: bytes, start: int, end: int, algorithm: str) -> SecretKey:
        """Algorithm hook; arguments are already validated and the length matches."""


class KEMSpi(ABC):
    """Factory for encapsulators and decapsulators of one KEM algorithm.

    Subclasses validate key and parameters in the ``_new_*`` hooks and must not
    consume randomness or do any cryptographic work there.
    """

    name: str = ""

    def new_encapsulator(
        self,
        public_key: Any,
        params: Optional[Any] = None,
        rng: Optional[RandomSource] = None,
    ) -> EncapsulatorSpi:
        """Bind ``public_key`` and ``params`` into an encapsulator.

        ``rng`` defaults to the operating system CSPRNG.
        """
        if public_key is None:
            raise InvalidKeyError("public key must not be None")
        encapsulator = self._new_encapsulator(public_key, params, resolve_rng(rng))
        logger.debug(
            "%s: new encapsulator (secret_size=%d, encapsulation_size=%d)",
            self.name or type(self).__name__,
            encapsulator.secret_size(),
            encapsulator.encapsulation_size(),
        )
        return encapsulator

    def new_decapsulator(self, private_key: Any, params: Optional[Any] = None) -> DecapsulatorSpi:
        """Bind ``private_key`` and ``params`` into a decapsulator."""
        if private_key is None:
            raise InvalidKeyError("private key must not be None")
        decapsulator = self._new_decapsulator(private_key, params)
        logger.debug(
            "%s: new decapsulator (secret_size=%d, encapsulation_size=%d)",
            self.name or type(self).__name__,
            decapsulator.secret_size(),
            decapsulator.encapsulation_size(),
        )
        return decapsulator

    @abstractmethod
    def _new_encapsulator(self, public_key: Any, params: Optional[Any], rng: RandomSource) -> EncapsulatorSpi:
        ...

    @abstractmethod
    def _new_decapsulator(self, private_key: Any, params: Optional[Any]) -> DecapsulatorSpi:
        ...
