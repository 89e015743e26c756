"""
blindwage: anonymous disclosure with RSA blind signatures.

A signing authority attests to values submitted by registered
participants without learning the values and without being able to link
a published value back to whoever submitted it.

- **Participants** blind a value, self-sign the blinded bytes (PSS),
  and later unblind and verify the authority's answer.
- **The authority** checks registration, single use and the
  self-signature, then blind-signs.  One signature per registered key.

Quick start
-----------
::

    from blindwage import AuthorityRegistry, ParticipantSession

    authority = AuthorityRegistry.create()
    alice = ParticipantSession.create(authority.public_key)
    authority.register_participants([alice.public_key])

    submission = alice.blind(b"Below the glass ceiling")
    blind_sig = authority.issue_signature(submission)
    disclosure = alice.disclose(blind_sig)

    assert disclosure.verify(authority.public_key)
    print(disclosure)
"""

__version__ = "0.1.0"

# ── configuration ───────────────────────────────────────────────────────
from .config import (
    KEY_BITS,
    HASH_BITS,
    PUBLIC_EXPONENT,
    ProtocolParams,
    ProtocolSettings,
    DEFAULT_PARAMS,
)

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    BlindWageError,
    KeyGenerationFailed,
    ProtocolStateError,
    AlreadyBlinded,
    NotBlinded,
    NotRegistered,
    AlreadyConsumed,
    DuplicateParticipant,
    RegistrySealed,
    RegistryNotSealed,
    VerificationError,
    SignatureInvalid,
    SignatureMismatch,
    PrimitiveError,
    BlindingFailed,
    SigningFailed,
)

# ── keys ────────────────────────────────────────────────────────────────
from .keys import (
    KeyPair,
    generate_keypair,
    public_key_id,
    fingerprint,
    public_key_to_pem,
    load_public_key,
)

# ── participant / authority ─────────────────────────────────────────────
from .session import SessionState, BlindedSubmission, ParticipantSession
from .registry import RegistrationEntry, AuthorityRegistry

# ── publication & orchestration ─────────────────────────────────────────
from .disclosure import Disclosure, verify_disclosure
from .protocol import DisclosureProtocol, run_disclosure

# ── primitives (for advanced usage / interop) ───────────────────────────
from .hash import full_domain_hash
from .primitives import (
    BlindingFactor,
    self_sign,
    self_verify,
    blind,
    blind_sign,
    unblind,
    verify_blind_signature,
)

__all__ = [
    # version
    "__version__",
    # config
    "KEY_BITS", "HASH_BITS", "PUBLIC_EXPONENT",
    "ProtocolParams", "ProtocolSettings", "DEFAULT_PARAMS",
    # errors
    "BlindWageError", "KeyGenerationFailed",
    "ProtocolStateError", "AlreadyBlinded", "NotBlinded", "NotRegistered",
    "AlreadyConsumed", "DuplicateParticipant", "RegistrySealed",
    "RegistryNotSealed",
    "VerificationError", "SignatureInvalid", "SignatureMismatch",
    "PrimitiveError", "BlindingFailed", "SigningFailed",
    # keys
    "KeyPair", "generate_keypair", "public_key_id", "fingerprint",
    "public_key_to_pem", "load_public_key",
    # protocol roles
    "SessionState", "BlindedSubmission", "ParticipantSession",
    "RegistrationEntry", "AuthorityRegistry",
    # publication
    "Disclosure", "verify_disclosure",
    "DisclosureProtocol", "run_disclosure",
    # primitives
    "full_domain_hash", "BlindingFactor",
    "self_sign", "self_verify",
    "blind", "blind_sign", "unblind", "verify_blind_signature",
]
