"""kemkit: a pluggable Key Encapsulation Mechanism contract with DHKEM providers."""

from .core import (
    KEM,
    KEMSpi,
    EncapsulatorSpi,
    DecapsulatorSpi,
    SecretKey,
    Encapsulated,
    GENERIC,
    KEMError,
    InvalidKeyError,
    InvalidParameterError,
    SecretRangeError,
    UnsupportedCombinationError,
    MissingArgumentError,
    DecapsulateError,
)

__version__ = "0.1.0"

__all__ = [
    "KEM",
    "KEMSpi",
    "EncapsulatorSpi",
    "DecapsulatorSpi",
    "SecretKey",
    "Encapsulated",
    "GENERIC",
    "KEMError",
    "InvalidKeyError",
    "InvalidParameterError",
    "SecretRangeError",
    "UnsupportedCombinationError",
    "MissingArgumentError",
    "DecapsulateError",
]
