"""
Authority side of the disclosure protocol.

The ``AuthorityRegistry`` holds the signing key and the set of
registered participant keys.  It issues **at most one** blind signature
per registered key and none to anyone else.

Registration
------------
Registration is additive and ends with an explicit seal:

    registry.add_participant(pk_a)
    registry.add_participant(pk_b)
    registry.seal()

or, in one call, ``registry.register_participants([pk_a, pk_b])`` which
adds and seals.  Once sealed the participant set is frozen: nothing can
be added, nothing is ever replaced, and consumption state is never
reset.  Signatures are only issued after sealing.

Issuance
--------
``issue_signature`` checks, in order:

1. submitter key is registered          → ``NotRegistered``
2. its registration is still unused     → ``AlreadyConsumed``
3. the PSS self-signature verifies      → ``SignatureInvalid``

then marks the entry consumed and blind-signs.  Steps 2–3 and the mark
run under the entry's own lock: two concurrent submissions from the
same key cannot both pass, while different keys never contend.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from cryptography.hazmat.primitives.asymmetric import rsa

from .config import DEFAULT_PARAMS, ProtocolParams
from .errors import (
    AlreadyConsumed,
    DuplicateParticipant,
    NotRegistered,
    RegistryNotSealed,
    RegistrySealed,
    SignatureInvalid,
)
from .keys import KeyPair, fingerprint, generate_keypair, public_key_id
from .primitives import blind_sign, self_verify
from .session import BlindedSubmission

logger = logging.getLogger(__name__)


# ── registration entry ──────────────────────────────────────────────────

@dataclass
class RegistrationEntry:
    """A registered participant key and its single-use flag."""

    public_key: rsa.RSAPublicKey
    consumed: bool = False
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False,
    )

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.public_key)


# ── registry ────────────────────────────────────────────────────────────

class AuthorityRegistry:
    """
    Blind-signing authority with a sealed, single-use registration set.

    The authority only ever sees opaque blinded bytes, the claimed
    submitter key and its self-signature.
    """

    def __init__(
        self,
        key_pair: KeyPair,
        params: Optional[ProtocolParams] = None,
    ) -> None:
        self._key = key_pair
        self._params = params or DEFAULT_PARAMS

        # key_id → entry; immutable once sealed
        self._entries: Dict[bytes, RegistrationEntry] = {}
        self._sealed = False
        self._lock = threading.Lock()

    @classmethod
    def create(cls, params: Optional[ProtocolParams] = None) -> AuthorityRegistry:
        """New authority with a freshly generated signing key."""
        params = params or DEFAULT_PARAMS
        registry = cls(generate_keypair(params), params)
        logger.info("authority %s created", registry.fingerprint)
        return registry

    # ── registration ───────────────────────────────────────────────────

    def add_participant(self, public_key: rsa.RSAPublicKey) -> None:
        """Register one participant key.  Not allowed after ``seal()``."""
        kid = public_key_id(public_key)
        with self._lock:
            if self._sealed:
                raise RegistrySealed("registry is sealed")
            if kid in self._entries:
                raise DuplicateParticipant(
                    f"participant {fingerprint(public_key)} already registered"
                )
            self._entries[kid] = RegistrationEntry(public_key=public_key)
        logger.debug("registered participant %s", fingerprint(public_key))

    def register_participants(
        self,
        public_keys: Iterable[rsa.RSAPublicKey],
    ) -> None:
        """
        Register a batch of keys and seal the registry.

        The whole batch is checked for duplicates (against itself and
        existing entries) before anything is installed.
        """
        batch: Dict[bytes, rsa.RSAPublicKey] = {}
        for pk in public_keys:
            kid = public_key_id(pk)
            if kid in batch:
                raise DuplicateParticipant(
                    f"participant {fingerprint(pk)} listed twice"
                )
            batch[kid] = pk

        with self._lock:
            if self._sealed:
                raise RegistrySealed("registry is sealed")
            for kid, pk in batch.items():
                if kid in self._entries:
                    raise DuplicateParticipant(
                        f"participant {fingerprint(pk)} already registered"
                    )
            for kid, pk in batch.items():
                self._entries[kid] = RegistrationEntry(public_key=pk)
            self._sealed = True

        logger.info(
            "authority %s sealed with %d participants",
            self.fingerprint, len(self._entries),
        )

    def seal(self) -> None:
        """Close registration.  Idempotent."""
        with self._lock:
            if self._sealed:
                return
            self._sealed = True
        logger.info(
            "authority %s sealed with %d participants",
            self.fingerprint, len(self._entries),
        )

    # ── issuance ───────────────────────────────────────────────────────

    def issue_signature(self, submission: BlindedSubmission) -> bytes:
        """
        Authenticate a submission and blind-sign it.

        Raises ``RegistryNotSealed``, ``NotRegistered``,
        ``AlreadyConsumed`` or ``SignatureInvalid``; once the entry is
        marked consumed it stays consumed, even if signing then fails
        with ``SigningFailed``.
        """
        if not self._sealed:
            raise RegistryNotSealed("registration has not been sealed")

        submitter = fingerprint(submission.submitter_public_key)
        entry = self._entries.get(submission.submitter_key_id)
        if entry is None:
            logger.warning("rejected %s: not registered", submitter)
            raise NotRegistered(f"participant {submitter} is not registered")

        with entry.lock:
            if entry.consumed:
                logger.warning("rejected %s: already consumed", submitter)
                raise AlreadyConsumed(
                    f"participant {submitter} already received a signature"
                )
            try:
                self_verify(
                    submission.blinded,
                    submission.self_signature,
                    submission.submitter_public_key,
                )
            except SignatureInvalid:
                logger.warning("rejected %s: bad self-signature", submitter)
                raise
            entry.consumed = True

        blind_sig = blind_sign(submission.blinded, self._key)
        logger.info("issued blind signature to %s", submitter)
        return blind_sig

    # ── introspection ──────────────────────────────────────────────────

    def is_registered(self, public_key: rsa.RSAPublicKey) -> bool:
        return public_key_id(public_key) in self._entries

    def is_consumed(self, public_key: rsa.RSAPublicKey) -> bool:
        entry = self._entries.get(public_key_id(public_key))
        if entry is None:
            raise NotRegistered(
                f"participant {fingerprint(public_key)} is not registered"
            )
        return entry.consumed

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self._key.public_key

    @property
    def fingerprint(self) -> str:
        return self._key.fingerprint

    @property
    def params(self) -> ProtocolParams:
        return self._params

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def num_participants(self) -> int:
        return len(self._entries)

    @property
    def num_consumed(self) -> int:
        return sum(1 for e in self._entries.values() if e.consumed)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return (
            f"AuthorityRegistry({self.fingerprint}, {state}, "
            f"{self.num_consumed}/{self.num_participants} used)"
        )
