"""DHKEM key encapsulation (RFC 9180, section 4.1) over the cryptography package.

Supported suites:

    id      name                           Nsecret  Nenc  Nsk
    0x0010  DHKEM(P-256, HKDF-SHA256)         32     65    32
    0x0011  DHKEM(P-384, HKDF-SHA384)         48     97    48
    0x0012  DHKEM(P-521, HKDF-SHA512)         64    133    66
    0x0020  DHKEM(X25519, HKDF-SHA256)        32     32    32
    0x0021  DHKEM(X448, HKDF-SHA512)          64     56    56

The suite follows from the key: an X25519 key selects 0x0020, a P-384 key
selects 0x0011 and so on. Parameters are optional; when given they must be a
:class:`DHKEMParameters` naming the same suite as the key.

Encapsulation derives the ephemeral key pair from ``Nsk`` bytes of the
caller's randomness source (``DeriveKeyPair``), so a supplied source is what
actually drives the ephemeral key. The encapsulation message is the
serialized ephemeral public key; the shared secret is
``ExtractAndExpand(DH(skE, pkR), enc || pkR)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, x448, x25519

from kemkit.core.exceptions import DecapsulateError, InvalidKeyError, InvalidParameterError
from kemkit.core.models import Encapsulated, SecretKey, slice_secret
from kemkit.core.random import RandomSource, read_random
from kemkit.core.spi import DecapsulatorSpi, EncapsulatorSpi, KEMSpi

from .kdf import labeled_expand, labeled_extract


logger = logging.getLogger(__name__)

PublicKey = Union[x25519.X25519PublicKey, x448.X448PublicKey, ec.EllipticCurvePublicKey]
PrivateKey = Union[x25519.X25519PrivateKey, x448.X448PrivateKey, ec.EllipticCurvePrivateKey]


@dataclass(frozen=True)
class DHKEMSuite:
    kem_id: int
    name: str
    hash_name: str
    secret_size: int
    encapsulation_size: int
    private_key_size: int
    # None for the Montgomery curves; P-curves carry the curve, group order and DeriveKeyPair bitmask
    curve: Optional[ec.EllipticCurve] = None
    order: int = 0
    bitmask: int = 0xFF

    @property
    def suite_id(self) -> bytes:
        return b"KEM" + self.kem_id.to_bytes(2, "big")

    @property
    def is_ec(self) -> bool:
        return self.curve is not None


P256 = DHKEMSuite(
    kem_id=0x0010,
    name="DHKEM-P256-HKDF-SHA256",
    hash_name="sha256",
    secret_size=32,
    encapsulation_size=65,
    private_key_size=32,
    curve=ec.SECP256R1(),
    order=int(
        "ffffffff00000000ffffffffffffffff"
        "bce6faada7179e84f3b9cac2fc632551",
        16,
    ),
)
P384 = DHKEMSuite(
    kem_id=0x0011,
    name="DHKEM-P384-HKDF-SHA384",
    hash_name="sha384",
    secret_size=48,
    encapsulation_size=97,
    private_key_size=48,
    curve=ec.SECP384R1(),
    order=int(
        "ffffffffffffffffffffffffffffffff"
        "ffffffffffffffffc7634d81f4372ddf"
        "581a0db248b0a77aecec196accc52973",
        16,
    ),
)
P521 = DHKEMSuite(
    kem_id=0x0012,
    name="DHKEM-P521-HKDF-SHA512",
    hash_name="sha512",
    secret_size=64,
    encapsulation_size=133,
    private_key_size=66,
    curve=ec.SECP521R1(),
    order=int(
        "01ff"
        "ffffffffffffffffffffffffffffffff"
        "fffffffffffffffffffffffffffffffa"
        "51868783bf2f966b7fcc0148f709a5d0"
        "3bb5c9b8899c47aebb6fb71e91386409",
        16,
    ),
    bitmask=0x01,
)
X25519 = DHKEMSuite(
    kem_id=0x0020,
    name="DHKEM-X25519-HKDF-SHA256",
    hash_name="sha256",
    secret_size=32,
    encapsulation_size=32,
    private_key_size=32,
)
X448 = DHKEMSuite(
    kem_id=0x0021,
    name="DHKEM-X448-HKDF-SHA512",
    hash_name="sha512",
    secret_size=64,
    encapsulation_size=56,
    private_key_size=56,
)

SUITES = {suite.name: suite for suite in (P256, P384, P521, X25519, X448)}
_SUITES_BY_ID = {suite.kem_id: suite for suite in SUITES.values()}
_SUITES_BY_CURVE = {suite.curve.name: suite for suite in SUITES.values() if suite.is_ec}


def get_suite(name_or_id: Union[str, int]) -> DHKEMSuite:
    """Look a suite up by its name (``"DHKEM-X25519-HKDF-SHA256"``) or KEM id (``0x0020``)."""
    suite = _SUITES_BY_ID.get(name_or_id) if isinstance(name_or_id, int) else SUITES.get(name_or_id)
    if suite is None:
        raise InvalidParameterError(f"unknown DHKEM suite: {name_or_id!r}")
    return suite


@dataclass(frozen=True)
class DHKEMParameters:
    """Optional parameters pinning a DHKEM suite by its RFC 9180 KEM id."""

    kem_id: int

    @classmethod
    def for_suite(cls, name: str) -> "DHKEMParameters":
        return cls(get_suite(name).kem_id)


def suite_for_key(key) -> DHKEMSuite:
    """Return the suite a public or private key belongs to, or raise InvalidKeyError."""
    if isinstance(key, (x25519.X25519PublicKey, x25519.X25519PrivateKey)):
        return X25519
    if isinstance(key, (x448.X448PublicKey, x448.X448PrivateKey)):
        return X448
    if isinstance(key, (ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey)):
        suite = _SUITES_BY_CURVE.get(key.curve.name)
        if suite is None:
            raise InvalidKeyError(f"unsupported curve for DHKEM: {key.curve.name}")
        return suite
    raise InvalidKeyError(f"unsupported key type for DHKEM: {type(key).__name__}")


def generate_keypair(suite: Union[str, int, DHKEMSuite] = X25519) -> Tuple[PrivateKey, PublicKey]:
    """Generate a fresh receiver key pair for ``suite``; returns ``(private, public)``."""
    if not isinstance(suite, DHKEMSuite):
        suite = get_suite(suite)
    if suite is X25519:
        private_key = x25519.X25519PrivateKey.generate()
    elif suite is X448:
        private_key = x448.X448PrivateKey.generate()
    else:
        private_key = ec.generate_private_key(suite.curve)
    return private_key, private_key.public_key()


# ----------------------------------------------------------------------
# Group operations
# ----------------------------------------------------------------------

def serialize_public_key(suite: DHKEMSuite, public_key: PublicKey) -> bytes:
    if suite.is_ec:
        return public_key.public_bytes(
            serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
        )
    return public_key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)


def deserialize_public_key(suite: DHKEMSuite, data: bytes) -> PublicKey:
    # ValueError on anything that is not a valid point of the right size
    if suite.is_ec:
        if data[:1] != b"\x04":
            raise ValueError("expected an uncompressed point")
        return ec.EllipticCurvePublicKey.from_encoded_point(suite.curve, data)
    if suite is X25519:
        return x25519.X25519PublicKey.from_public_bytes(data)
    return x448.X448PublicKey.from_public_bytes(data)


def derive_key_pair(suite: DHKEMSuite, ikm: bytes) -> Tuple[PrivateKey, PublicKey]:
    """RFC 9180 DeriveKeyPair: deterministic key pair from input keying material."""
    prk = labeled_extract(suite.hash_name, suite.suite_id, b"", b"dkp_prk", ikm)
    if suite is X25519:
        sk = labeled_expand(suite.hash_name, suite.suite_id, prk, b"sk", b"", suite.private_key_size)
        private_key = x25519.X25519PrivateKey.from_private_bytes(sk)
    elif suite is X448:
        sk = labeled_expand(suite.hash_name, suite.suite_id, prk, b"sk", b"", suite.private_key_size)
        private_key = x448.X448PrivateKey.from_private_bytes(sk)
    else:
        private_key = None
        for counter in range(256):
            candidate = bytearray(
                labeled_expand(
                    suite.hash_name,
                    suite.suite_id,
                    prk,
                    b"candidate",
                    counter.to_bytes(1, "big"),
                    suite.private_key_size,
                )
            )
            candidate[0] &= suite.bitmask
            scalar = int.from_bytes(candidate, "big")
            if 0 < scalar < suite.order:
                private_key = ec.derive_private_key(scalar, suite.curve)
                break
        if private_key is None:
            raise RuntimeError("DeriveKeyPair: no valid scalar after 256 candidates")
    return private_key, private_key.public_key()


def _dh(suite: DHKEMSuite, private_key: PrivateKey, public_key: PublicKey) -> bytes:
    if suite.is_ec:
        return private_key.exchange(ec.ECDH(), public_key)
    return private_key.exchange(public_key)


def _extract_and_expand(suite: DHKEMSuite, dh: bytes, kem_context: bytes) -> bytes:
    eae_prk = labeled_extract(suite.hash_name, suite.suite_id, b"", b"eae_prk", dh)
    return labeled_expand(
        suite.hash_name, suite.suite_id, eae_prk, b"shared_secret", kem_context, suite.secret_size
    )


# ----------------------------------------------------------------------
# Encapsulator / decapsulator
# ----------------------------------------------------------------------

class DHKEMEncapsulator(EncapsulatorSpi):
    __slots__ = ("_suite", "_public_key", "_rng")

    def __init__(self, suite: DHKEMSuite, public_key: PublicKey, rng: RandomSource):
        self._bind(_suite=suite, _public_key=public_key, _rng=rng)

    @property
    def suite(self) -> DHKEMSuite:
        return self._suite

    def secret_size(self) -> int:
        return self._suite.secret_size

    def encapsulation_size(self) -> int:
        return self._suite.encapsulation_size

    def _encapsulate(self, start: int, end: int, algorithm: str) -> Encapsulated:
        suite = self._suite
        ikm = read_random(self._rng, suite.private_key_size)
        ephemeral_private, ephemeral_public = derive_key_pair(suite, ikm)
        try:
            dh = _dh(suite, ephemeral_private, self._public_key)
        except ValueError as exc:
            # X25519/X448 refuse low-order points
            raise InvalidKeyError("receiver public key rejected during key agreement") from exc
        enc = serialize_public_key(suite, ephemeral_public)
        kem_context = enc + serialize_public_key(suite, self._public_key)
        shared_secret = _extract_and_expand(suite, dh, kem_context)
        return Encapsulated(slice_secret(shared_secret, start, end, algorithm), enc, None)


class DHKEMDecapsulator(DecapsulatorSpi):
    __slots__ = ("_suite", "_private_key")

    def __init__(self, suite: DHKEMSuite, private_key: PrivateKey):
        self._bind(_suite=suite, _private_key=private_key)

    @property
    def suite(self) -> DHKEMSuite:
        return self._suite

    def secret_size(self) -> int:
        return self._suite.secret_size

    def encapsulation_size(self) -> int:
        return self._suite.encapsulation_size

    def _decapsulate(self, encapsulation: bytes, start: int, end: int, algorithm: str) -> SecretKey:
        suite = self._suite
        try:
            ephemeral_public = deserialize_public_key(suite, encapsulation)
            dh = _dh(suite, self._private_key, ephemeral_public)
        except ValueError:
            raise DecapsulateError() from None
        kem_context = encapsulation + serialize_public_key(suite, self._private_key.public_key())
        shared_secret = _extract_and_expand(suite, dh, kem_context)
        return slice_secret(shared_secret, start, end, algorithm)


class DHKEM(KEMSpi):
    """KEM factory for every suite in :data:`SUITES`."""

    name = "DHKEM"

    def _resolve_suite(self, key, params) -> DHKEMSuite:
        suite = suite_for_key(key)
        if params is None:
            return suite
        if not isinstance(params, DHKEMParameters):
            raise InvalidParameterError(
                f"DHKEM expects DHKEMParameters or None, got {type(params).__name__}"
            )
        if params.kem_id != suite.kem_id:
            raise InvalidParameterError(
                f"parameters select KEM id 0x{params.kem_id:04x} but the key belongs to {suite.name}"
            )
        return suite

    def _new_encapsulator(self, public_key, params, rng) -> DHKEMEncapsulator:
        if not isinstance(public_key, (x25519.X25519PublicKey, x448.X448PublicKey, ec.EllipticCurvePublicKey)):
            raise InvalidKeyError(f"expected a public key, got {type(public_key).__name__}")
        suite = self._resolve_suite(public_key, params)
        logger.debug("binding encapsulator to %s", suite.name)
        return DHKEMEncapsulator(suite, public_key, rng)

    def _new_decapsulator(self, private_key, params) -> DHKEMDecapsulator:
        if not isinstance(private_key, (x25519.X25519PrivateKey, x448.X448PrivateKey, ec.EllipticCurvePrivateKey)):
            raise InvalidKeyError(f"expected a private key, got {type(private_key).__name__}")
        suite = self._resolve_suite(private_key, params)
        logger.debug("binding decapsulator to %s", suite.name)
        return DHKEMDecapsulator(suite, private_key)
