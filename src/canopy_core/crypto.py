from __future__ import annotations
import base64
import hashlib
from typing import Tuple

import nacl.signing
import nacl.exceptions
import rfc8785


def B64(b: bytes) -> str:
    """Base64-encode bytes to ASCII string."""
    return base64.b64encode(b).decode("ascii")


def B64D(s: str) -> bytes:
    """Decode base64 ASCII string to bytes with strict validation."""
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except Exception as e:
        raise ValueError("invalid base64") from e


def check_algorithm(name: str) -> str:
    """Return the hashlib name for ``name``, rejecting variable-length digests.

    Accepts the common spellings, e.g. ``SHA-256``, ``sha256``, ``sha3-256``.
    """
    lowered = name.strip().lower()
    for candidate in (lowered, lowered.replace("-", ""), lowered.replace("-", "_")):
        if candidate in hashlib.algorithms_available:
            break
    else:
        raise ValueError(f"unknown hash algorithm: {name}")
    if candidate.startswith("shake"):
        raise ValueError(f"{name} has no fixed digest size")
    return candidate


def digest_size(algorithm: str) -> int:
    return hashlib.new(algorithm).digest_size


def hash_bytes(data: bytes, algorithm: str = "sha256") -> bytes:
    return hashlib.new(algorithm, data).digest()


def hash_pair(left: bytes, right: bytes, algorithm: str = "sha256") -> bytes:
    """Digest of left ++ right. Order matters."""
    return hashlib.new(algorithm, left + right).digest()


def jcs_dumps(obj) -> bytes:
    """Deterministic canonical JSON bytes per RFC8785."""
    return rfc8785.dumps(obj)


def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = nacl.signing.SigningKey.generate()
    return (sk.encode(), sk.verify_key.encode())


def ed25519_sign(sk_bytes: bytes, data: bytes) -> bytes:
    return nacl.signing.SigningKey(sk_bytes).sign(data).signature


def ed25519_verify(pk_bytes: bytes, data: bytes, signature: bytes) -> bool:
    vk = nacl.signing.VerifyKey(pk_bytes)
    try:
        vk.verify(data, signature)
        return True
    except nacl.exceptions.BadSignatureError:
        return False
