"""Caller-facing KEM object.

``KEM`` pairs an algorithm name with the provider that implements it. The
built-in table is fixed; there is no discovery or plugin registration.

    kem = KEM.get_instance("DHKEM")
    enc = kem.new_encapsulator(public_key)
    result = enc.encapsulate()
    key = kem.new_decapsulator(private_key).decapsulate(result.encapsulation)
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Type

from .exceptions import MissingArgumentError
from .random import RandomSource
from .spi import DecapsulatorSpi, EncapsulatorSpi, KEMSpi


def _builtin_providers() -> Dict[str, Type[KEMSpi]]:
    # imported lazily: the providers themselves import kemkit.core
    from kemkit.security.dhkem import DHKEM

    return {"DHKEM": DHKEM}


class KEM:
    __slots__ = ("_algorithm", "_spi")

    def __init__(self, algorithm: str, spi: KEMSpi):
        if algorithm is None or spi is None:
            raise MissingArgumentError("algorithm and spi are required")
        self._algorithm = algorithm
        self._spi = spi

    @classmethod
    def get_instance(cls, algorithm: str) -> "KEM":
        """Return a KEM for a built-in algorithm name (case-insensitive)."""
        if algorithm is None:
            raise MissingArgumentError("algorithm must not be None")
        for name, provider in _builtin_providers().items():
            if name.lower() == algorithm.lower():
                return cls(name, provider())
        raise LookupError(f"no built-in KEM named {algorithm!r}")

    @staticmethod
    def available_algorithms() -> Tuple[str, ...]:
        return tuple(_builtin_providers())

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def spi(self) -> KEMSpi:
        return self._spi

    def new_encapsulator(
        self,
        public_key: Any,
        params: Optional[Any] = None,
        rng: Optional[RandomSource] = None,
    ) -> EncapsulatorSpi:
        return self._spi.new_encapsulator(public_key, params, rng)

    def new_decapsulator(self, private_key: Any, params: Optional[Any] = None) -> DecapsulatorSpi:
        return self._spi.new_decapsulator(private_key, params)

    def __repr__(self):
        return f"KEM(algorithm={self._algorithm!r}, spi={type(self._spi).__name__})"
