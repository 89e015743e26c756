"""
Exception hierarchy for blindwage.

Three families, matching the three remediation paths a caller has:

- **ProtocolStateError**: the request is not allowed in the current
  state (not registered, already used, already blinded).  Never safe to
  retry on the same session or identity.
- **VerificationError**: a signature did not check out.  Investigate
  keys or tampering.
- **PrimitiveError / KeyGenerationFailed**: the underlying RSA
  machinery failed.  Check configuration and entropy.
"""

from __future__ import annotations


class BlindWageError(Exception):
    """Base class for every error raised by blindwage."""


# ── setup ───────────────────────────────────────────────────────────────

class KeyGenerationFailed(BlindWageError):
    """RSA key-pair generation failed."""


# ── protocol state ──────────────────────────────────────────────────────

class ProtocolStateError(BlindWageError):
    """Operation not permitted in the current protocol state."""


class AlreadyBlinded(ProtocolStateError):
    """The participant session has already used its one blind."""


class NotBlinded(ProtocolStateError):
    """No blinding factor is held: never blinded, or already unblinded."""


class NotRegistered(ProtocolStateError):
    """The submitter's public key is not in the registry."""


class AlreadyConsumed(ProtocolStateError):
    """The submitter's registration has already been used."""


class DuplicateParticipant(ProtocolStateError):
    """The public key is already registered."""


class RegistrySealed(ProtocolStateError):
    """Registration is closed; no participant can be added."""


class RegistryNotSealed(ProtocolStateError):
    """Signatures are only issued once registration is sealed."""


# ── verification ────────────────────────────────────────────────────────

class VerificationError(BlindWageError):
    """A cryptographic check failed."""


class SignatureInvalid(VerificationError):
    """A PSS self-signature does not match its message and key."""


class SignatureMismatch(VerificationError):
    """An unblinded signature does not verify against the original value."""


# ── primitives ──────────────────────────────────────────────────────────

class PrimitiveError(BlindWageError):
    """The underlying RSA operation itself failed."""


class BlindingFailed(PrimitiveError):
    """Blinding the domain hash failed."""


class SigningFailed(PrimitiveError):
    """Producing a PSS or blind signature failed."""
