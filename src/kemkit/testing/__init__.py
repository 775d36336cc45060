"""Test doubles and conformance checks for KEM providers."""

from .mock import MockKEM, MockParameters, MockPublicKey, MockPrivateKey, generate_mock_keypair
from .conformance import ConformanceError, ConformanceReport, check_conformance

__all__ = [
    "MockKEM",
    "MockParameters",
    "MockPublicKey",
    "MockPrivateKey",
    "generate_mock_keypair",
    "ConformanceError",
    "ConformanceReport",
    "check_conformance",
]
