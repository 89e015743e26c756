"""
RSA key pairs for participants and the signing authority.

Key generation and serialisation are delegated to ``cryptography``.
A public key's identity is its DER-encoded SubjectPublicKeyInfo: two
keys are the same participant iff these bytes are equal.  The private
half never leaves the ``KeyPair`` object.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .config import DEFAULT_PARAMS, ProtocolParams
from .errors import KeyGenerationFailed

logger = logging.getLogger(__name__)


# ── public-key identity ─────────────────────────────────────────────────

def public_key_id(public_key: rsa.RSAPublicKey) -> bytes:
    """Canonical identity of a public key (DER SubjectPublicKeyInfo)."""
    return public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def fingerprint(public_key: rsa.RSAPublicKey) -> str:
    """Short hex SHA-256 of the key identity, for logs and display."""
    return hashlib.sha256(public_key_id(public_key)).hexdigest()[:16]


def public_key_to_pem(public_key: rsa.RSAPublicKey) -> bytes:
    return public_key.public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def load_public_key(pem: bytes) -> rsa.RSAPublicKey:
    """Parse a PEM public key; only RSA keys are accepted."""
    try:
        key = serialization.load_pem_public_key(pem)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise ValueError(f"malformed public key: {exc}") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError(f"expected an RSA public key, got {type(key).__name__}")
    return key


def modulus_bytes(public_key: rsa.RSAPublicKey) -> int:
    """Byte length of the modulus (length of every signature)."""
    return (public_key.key_size + 7) // 8


# ── key pair ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class KeyPair:
    """An RSA key pair; the private half is owned exclusively."""

    private_key: rsa.RSAPrivateKey = field(repr=False)

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self.private_key.public_key()

    @property
    def key_id(self) -> bytes:
        return public_key_id(self.public_key)

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.public_key)

    @property
    def key_size(self) -> int:
        return self.private_key.key_size

    def __repr__(self) -> str:
        return f"KeyPair(rsa-{self.key_size}, {self.fingerprint})"


def generate_keypair(params: Optional[ProtocolParams] = None) -> KeyPair:
    """
    Generate a fresh RSA key pair.

    Raises ``KeyGenerationFailed`` if the backend rejects the parameters
    or cannot produce a key; the failure is not retried.
    """
    params = params or DEFAULT_PARAMS
    try:
        private_key = rsa.generate_private_key(
            public_exponent=params.public_exponent,
            key_size=params.key_bits,
        )
    except (ValueError, UnsupportedAlgorithm, OSError) as exc:
        raise KeyGenerationFailed(
            f"could not generate rsa-{params.key_bits} key: {exc}"
        ) from exc

    kp = KeyPair(private_key=private_key)
    logger.debug("generated key pair %s", kp.fingerprint)
    return kp
