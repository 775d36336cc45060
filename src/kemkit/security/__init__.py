"""Concrete KEM providers built on the cryptography package.

- DHKEM (RFC 9180) over P-256, P-384, P-521, X25519 and X448
- labeled HKDF helpers shared by the providers
"""

from .dhkem import (
    DHKEM,
    DHKEMParameters,
    DHKEMSuite,
    SUITES,
    get_suite,
    generate_keypair,
)
from .kdf import labeled_extract, labeled_expand

__all__ = [
    "DHKEM",
    "DHKEMParameters",
    "DHKEMSuite",
    "SUITES",
    "get_suite",
    "generate_keypair",
    "labeled_extract",
    "labeled_expand",
]
