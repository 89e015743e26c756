"""
High-level orchestration of one authority and its participants.

Usage
-----
::

    from blindwage.protocol import DisclosureProtocol

    proto = DisclosureProtocol.setup(num_participants=2)
    alice, bob = proto.sessions

    disclosure = proto.disclose(alice, b"Below the glass ceiling")
    assert proto.verify(disclosure)
    print(disclosure)

In a real deployment the authority and each participant live in
different processes and exchange ``BlindedSubmission.to_dict()`` and
the blind signature over some transport; ``run_disclosure`` is the
same exchange with the transport removed.
"""

from __future__ import annotations

from typing import List, Optional

from .config import DEFAULT_PARAMS, ProtocolParams
from .disclosure import Disclosure, verify_disclosure
from .registry import AuthorityRegistry
from .session import ParticipantSession


def run_disclosure(
    session: ParticipantSession,
    registry: AuthorityRegistry,
    value: bytes,
) -> Disclosure:
    """blind → issue → unblind.  Errors from each step propagate."""
    submission = session.blind(value)
    blind_sig = registry.issue_signature(submission)
    return session.disclose(blind_sig)


class DisclosureProtocol:
    """
    An authority together with a fixed, sealed set of participants.

    Lifecycle:
    1. Setup: generate the authority and participant keys, register
       and seal.
    2. Disclose: each participant discloses one value.
    3. Verify: anyone checks a disclosure with the authority key.
    """

    def __init__(
        self,
        registry: AuthorityRegistry,
        sessions: List[ParticipantSession],
    ) -> None:
        self._registry = registry
        self._sessions = list(sessions)

    # ── factories ──────────────────────────────────────────────────────

    @classmethod
    def setup(
        cls,
        num_participants: int,
        params: Optional[ProtocolParams] = None,
    ) -> DisclosureProtocol:
        """
        Create an authority and ``num_participants`` registered sessions.
        """
        if num_participants < 0:
            raise ValueError("num_participants must be ≥ 0")
        params = params or DEFAULT_PARAMS

        registry = AuthorityRegistry.create(params)
        sessions = [
            ParticipantSession.create(registry.public_key, params)
            for _ in range(num_participants)
        ]
        registry.register_participants(s.public_key for s in sessions)
        return cls(registry, sessions)

    # ── protocol ───────────────────────────────────────────────────────

    def disclose(self, session: ParticipantSession, value: bytes) -> Disclosure:
        return run_disclosure(session, self._registry, value)

    def verify(self, disclosure: Disclosure) -> bool:
        return verify_disclosure(
            self._registry.public_key, disclosure, self._registry.params,
        )

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def registry(self) -> AuthorityRegistry:
        return self._registry

    @property
    def sessions(self) -> List[ParticipantSession]:
        return list(self._sessions)

    def __repr__(self) -> str:
        return f"DisclosureProtocol({self._registry!r})"
