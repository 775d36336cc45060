"""Labeled HKDF helpers (RFC 9180, section 4)."""

import hashlib
import hmac

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDFExpand


VERSION_LABEL = b"HPKE-v1"

_HASHES = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


def _hash_algorithm(hash_name: str) -> hashes.HashAlgorithm:
    try:
        return _HASHES[hash_name]()
    except KeyError:
        raise ValueError(f"unsupported hash: {hash_name}") from None


def hkdf_extract(hash_name: str, salt: bytes, ikm: bytes) -> bytes:
    # An empty salt is the same as a string of HashLen zero bytes.
    if not salt:
        salt = b"\x00" * hashlib.new(hash_name).digest_size
    return hmac.new(salt, ikm, hash_name).digest()


def hkdf_expand(hash_name: str, prk: bytes, info: bytes, length: int) -> bytes:
    hkdf = HKDFExpand(algorithm=_hash_algorithm(hash_name), length=length, info=info)
    return hkdf.derive(prk)


def labeled_extract(hash_name: str, suite_id: bytes, salt: bytes, label: bytes, ikm: bytes) -> bytes:
    labeled_ikm = VERSION_LABEL + suite_id + label + ikm
    return hkdf_extract(hash_name, salt, labeled_ikm)


def labeled_expand(
    hash_name: str,
    suite_id: bytes,
    prk: bytes,
    label: bytes,
    info: bytes,
    length: int,
) -> bytes:
    labeled_info = length.to_bytes(2, "big") + VERSION_LABEL + suite_id + label + info
    return hkdf_expand(hash_name, prk, labeled_info, length)
