"""
Participant side of the disclosure protocol.

A ``ParticipantSession`` is one registered submitter with one value to
disclose.  Lifecycle:

1. ``blind(value)``        → ``BlindedSubmission``   (sent to authority)
2. ``unblind(blind_sig)``  → signature over *value*  (verified locally)

The session blinds **at most once**.  The latch flips to ``BLINDED``
before any fallible work, so a failed blind cannot be retried on the
same session and a blinding factor is never reused.

The unblinded signature is checked against the original value before
it is returned; a session never hands back a signature that does not
verify under the authority's key.
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives.asymmetric import rsa

from .config import DEFAULT_PARAMS, ProtocolParams
from .disclosure import Disclosure
from .errors import AlreadyBlinded, NotBlinded, SignatureMismatch, SigningFailed
from .hash import full_domain_hash
from .keys import (
    KeyPair,
    fingerprint,
    generate_keypair,
    load_public_key,
    public_key_id,
    public_key_to_pem,
)
from .primitives import (
    BlindingFactor,
    blind,
    self_sign,
    unblind,
    verify_blind_signature,
)

logger = logging.getLogger(__name__)


# ── data structures ─────────────────────────────────────────────────────

class SessionState(Enum):
    """One-shot blinding latch."""

    FRESH = auto()      # may blind once
    BLINDED = auto()    # blind used up (successfully or not)


@dataclass(frozen=True)
class BlindedSubmission:
    """
    What a participant sends to the authority.

    ``blinded`` is opaque to the authority; ``self_signature`` is a PSS
    signature over ``blinded`` under ``submitter_public_key``.
    """

    blinded: bytes
    self_signature: bytes
    submitter_public_key: rsa.RSAPublicKey

    @property
    def submitter_key_id(self) -> bytes:
        return public_key_id(self.submitter_public_key)

    def to_dict(self) -> Dict[str, str]:
        return {
            "blinded": base64.b64encode(self.blinded).decode("ascii"),
            "self_signature": base64.b64encode(
                self.self_signature).decode("ascii"),
            "submitter_public_key": public_key_to_pem(
                self.submitter_public_key).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BlindedSubmission:
        try:
            blinded = base64.b64decode(data["blinded"], validate=True)
            sig = base64.b64decode(data["self_signature"], validate=True)
            pem = data["submitter_public_key"]
        except KeyError as exc:
            raise ValueError(f"submission missing field {exc}") from exc
        except (binascii.Error, TypeError) as exc:
            raise ValueError(f"submission is not valid base64: {exc}") from exc
        if not isinstance(pem, str):
            raise ValueError("submitter_public_key must be a PEM string")
        return cls(
            blinded=blinded,
            self_signature=sig,
            submitter_public_key=load_public_key(pem.encode("ascii")),
        )


# ── participant session ─────────────────────────────────────────────────

class ParticipantSession:
    """
    One participant, one value, one blind.

    Parameters
    ----------
    key_pair : KeyPair
        The participant's own key; its public half is what the
        authority registers.
    authority_public_key : RSAPublicKey
        Key the value is blinded against and the signature checked with.
    params : ProtocolParams or None
        Must match the authority's ``hash_bits``.
    """

    def __init__(
        self,
        key_pair: KeyPair,
        authority_public_key: rsa.RSAPublicKey,
        params: Optional[ProtocolParams] = None,
    ) -> None:
        self._key = key_pair
        self._authority_pk = authority_public_key
        self._params = params or DEFAULT_PARAMS

        self._lock = threading.Lock()
        self._state = SessionState.FRESH
        self._value: Optional[bytes] = None
        self._factor: Optional[BlindingFactor] = None

    @classmethod
    def create(
        cls,
        authority_public_key: rsa.RSAPublicKey,
        params: Optional[ProtocolParams] = None,
    ) -> ParticipantSession:
        """New session with a freshly generated key pair."""
        params = params or DEFAULT_PARAMS
        return cls(generate_keypair(params), authority_public_key, params)

    # ── blinding ───────────────────────────────────────────────────────

    def blind(self, value: bytes) -> BlindedSubmission:
        """
        Blind *value* for the authority and self-sign the result.

        Raises ``AlreadyBlinded`` on any second call, even if the first
        one failed.  ``BlindingFailed`` / ``SigningFailed`` propagate
        from the primitives.
        """
        with self._lock:
            if self._state is not SessionState.FRESH:
                raise AlreadyBlinded(
                    f"session {self.fingerprint} has already blinded a value"
                )
            self._state = SessionState.BLINDED

        self._value = value
        digest = full_domain_hash(value, self._params.hash_bits)

        blinded, factor = blind(digest, self._authority_pk)
        self._factor = factor

        try:
            sig = self_sign(blinded, self._key)
        except SigningFailed:
            # the blinded value is never sent; its factor is useless
            factor.clear()
            self._factor = None
            raise

        logger.debug("session %s blinded its value", self.fingerprint)
        return BlindedSubmission(
            blinded=blinded,
            self_signature=sig,
            submitter_public_key=self._key.public_key,
        )

    # ── unblinding ─────────────────────────────────────────────────────

    def unblind(self, blind_signature: bytes) -> bytes:
        """
        Unblind the authority's answer and verify it against the value.

        The blinding factor is discarded after this call whatever the
        outcome.  Raises ``NotBlinded`` if there is no factor left and
        ``SignatureMismatch`` if the result does not verify.
        """
        with self._lock:
            factor, self._factor = self._factor, None
        if factor is None or factor.cleared or self._value is None:
            raise NotBlinded(
                f"session {self.fingerprint} holds no blinding factor"
            )

        try:
            sig = unblind(self._authority_pk, blind_signature, factor)
        finally:
            factor.clear()

        digest = full_domain_hash(self._value, self._params.hash_bits)
        if not verify_blind_signature(self._authority_pk, digest, sig):
            logger.warning(
                "session %s: unblinded signature does not verify",
                self.fingerprint,
            )
            raise SignatureMismatch(
                "unblinded signature does not match the submitted value"
            )
        return sig

    def disclose(self, blind_signature: bytes) -> Disclosure:
        """Unblind and package the publishable ``(value, signature)``."""
        sig = self.unblind(blind_signature)
        return Disclosure(value=self._value, signature=sig)

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self._key.public_key

    @property
    def key_id(self) -> bytes:
        return self._key.key_id

    @property
    def fingerprint(self) -> str:
        return fingerprint(self._key.public_key)

    @property
    def authority_public_key(self) -> rsa.RSAPublicKey:
        return self._authority_pk

    def __repr__(self) -> str:
        return f"ParticipantSession({self.fingerprint}, {self._state.name})"
