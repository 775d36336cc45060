"""Core KEM contract: data model, provider interface and error taxonomy."""

from .exceptions import (
    KEMError,
    InvalidKeyError,
    InvalidParameterError,
    SecretRangeError,
    UnsupportedCombinationError,
    MissingArgumentError,
    DecapsulateError,
)
from .models import GENERIC, SecretKey, Encapsulated, check_range, slice_secret
from .random import default_rng, resolve_rng
from .spi import KEMSpi, EncapsulatorSpi, DecapsulatorSpi
from .kem import KEM

__all__ = [
    "KEMError",
    "InvalidKeyError",
    "InvalidParameterError",
    "SecretRangeError",
    "UnsupportedCombinationError",
    "MissingArgumentError",
    "DecapsulateError",
    "GENERIC",
    "SecretKey",
    "Encapsulated",
    "check_range",
    "slice_secret",
    "default_rng",
    "resolve_rng",
    "KEMSpi",
    "EncapsulatorSpi",
    "DecapsulatorSpi",
    "KEM",
]
