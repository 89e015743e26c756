"""
Authentication primitives.

Two independent signature layers are used:

1. **Self-signature** (RSA-PSS, SHA-256).  A participant signs its own
   blinded bytes with its session key, proving to the authority that
   the submission came from the registered key holder.

2. **Blind signature** (Chaum blind RSA over a full-domain hash).  The
   authority signs a value it cannot see:

       blind:     c  = m · rᵉ      mod n
       issue:     s' = cᵈ          mod n
       unblind:   s  = s' · r⁻¹    mod n   =  mᵈ  mod n
       verify:    sᵉ mod n  ==  m

   where  m = FDH(value)  and  r  is a fresh random unit mod n.

Unblinding with the wrong factor yields a value that simply fails
verification; it never raises.

References
----------
- Chaum (1983). "Blind Signatures for Untraceable Payments."
  CRYPTO 1982.
- Bellare & Rogaway (1996). "The Exact Security of Digital Signatures:
  How to Sign with RSA and Rabin."  EUROCRYPT 1996.
"""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass, field
from typing import Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .errors import BlindingFailed, SignatureInvalid, SigningFailed
from .keys import KeyPair, modulus_bytes


def _pss() -> padding.PSS:
    return padding.PSS(
        mgf=padding.MGF1(hashes.SHA256()),
        salt_length=padding.PSS.MAX_LENGTH,
    )


# ── self-signature (PSS) ────────────────────────────────────────────────

def self_sign(message: bytes, key_pair: KeyPair) -> bytes:
    """
    Probabilistic PSS signature over *message*.

    Consumes fresh randomness on every call, so two signatures over the
    same message differ.
    """
    try:
        return key_pair.private_key.sign(message, _pss(), hashes.SHA256())
    except (ValueError, TypeError) as exc:
        raise SigningFailed(f"PSS signing failed: {exc}") from exc


def self_verify(
    message: bytes,
    signature: bytes,
    public_key: rsa.RSAPublicKey,
) -> None:
    """
    Check a PSS signature.

    Returns nothing on success; raises ``SignatureInvalid`` otherwise.
    """
    try:
        public_key.verify(signature, message, _pss(), hashes.SHA256())
    except (InvalidSignature, ValueError, TypeError) as exc:
        raise SignatureInvalid("self-signature does not verify") from exc


# ── blinding factor ─────────────────────────────────────────────────────

@dataclass
class BlindingFactor:
    """
    Secret unblinder  r⁻¹ mod n, belonging to exactly one submission.

    Cleared as soon as the matching unblind has run.
    """

    unblinder: Optional[int] = field(repr=False)

    @property
    def cleared(self) -> bool:
        return self.unblinder is None

    def clear(self) -> None:
        """Drop the secret (best-effort in Python)."""
        self.unblinder = None


# ── blind RSA ───────────────────────────────────────────────────────────

def blind(
    digest: bytes,
    authority_public_key: rsa.RSAPublicKey,
) -> Tuple[bytes, BlindingFactor]:
    """
    Blind a domain hash under the authority's key.

    Returns the blinded value (modulus-length, big-endian) and the
    factor needed to unblind the authority's answer.
    """
    pub = authority_public_key.public_numbers()
    n, e = pub.n, pub.e
    m = int.from_bytes(digest, "big")
    if m >= n:
        raise BlindingFailed("digest is not smaller than the modulus")

    # r uniform over the units of Z_n, r ≥ 2
    while True:
        r = secrets.randbelow(n - 2) + 2
        if math.gcd(r, n) == 1:
            break

    blinded = (m * pow(r, e, n)) % n
    factor = BlindingFactor(unblinder=pow(r, -1, n))
    return blinded.to_bytes(modulus_bytes(authority_public_key), "big"), factor


def blind_sign(blinded: bytes, authority_key_pair: KeyPair) -> bytes:
    """
    Authority side: raw RSA signature  cᵈ mod n  over opaque bytes.

    Uses the CRT form and re-checks the result against the public
    exponent before releasing it.
    """
    priv = authority_key_pair.private_key.private_numbers()
    pub = priv.public_numbers
    n, e = pub.n, pub.e
    k = modulus_bytes(authority_key_pair.public_key)

    if len(blinded) > k:
        raise SigningFailed("blinded value longer than the modulus")
    c = int.from_bytes(blinded, "big")
    if c == 0 or c >= n:
        raise SigningFailed("blinded value out of range")

    m1 = pow(c, priv.dmp1, priv.p)
    m2 = pow(c, priv.dmq1, priv.q)
    h = (priv.iqmp * (m1 - m2)) % priv.p
    s = m2 + h * priv.q

    if pow(s, e, n) != c:
        raise SigningFailed("blind signature failed its consistency check")
    return s.to_bytes(k, "big")


def unblind(
    authority_public_key: rsa.RSAPublicKey,
    blind_signature: bytes,
    factor: BlindingFactor,
) -> bytes:
    """
    Remove the blinding:  s = s' · r⁻¹ mod n.

    Pure in its three inputs.  Out-of-range or foreign input produces a
    signature that fails ``verify_blind_signature``.
    """
    if factor.unblinder is None:
        raise ValueError("blinding factor has been cleared")
    n = authority_public_key.public_numbers().n
    s_blind = int.from_bytes(blind_signature, "big") % n
    s = (s_blind * factor.unblinder) % n
    return s.to_bytes(modulus_bytes(authority_public_key), "big")


def verify_blind_signature(
    authority_public_key: rsa.RSAPublicKey,
    digest: bytes,
    signature: bytes,
) -> bool:
    """
    Check an unblinded signature:  sᵉ mod n  ==  FDH(value).
    """
    pub = authority_public_key.public_numbers()
    s = int.from_bytes(signature, "big")
    if s == 0 or s >= pub.n:
        return False
    return pow(s, pub.e, pub.n) == int.from_bytes(digest, "big")
