"""Shared fixtures.  Keys are reduced to 1024 bits to keep the suite fast."""

from __future__ import annotations

from typing import List

import pytest

from blindwage import (
    AuthorityRegistry,
    KeyPair,
    ParticipantSession,
    ProtocolParams,
    generate_keypair,
)


@pytest.fixture(scope="session")
def params() -> ProtocolParams:
    return ProtocolParams(key_bits=1024, hash_bits=768)


@pytest.fixture(scope="session")
def authority_key(params) -> KeyPair:
    return generate_keypair(params)


@pytest.fixture(scope="session")
def participant_keys(params) -> List[KeyPair]:
    return [generate_keypair(params) for _ in range(3)]


@pytest.fixture
def registry(authority_key, params) -> AuthorityRegistry:
    """Fresh, unsealed authority reusing the session authority key."""
    return AuthorityRegistry(authority_key, params)


@pytest.fixture
def sessions(participant_keys, authority_key, params) -> List[ParticipantSession]:
    return [
        ParticipantSession(kp, authority_key.public_key, params)
        for kp in participant_keys
    ]


@pytest.fixture
def sealed_registry(registry, sessions) -> AuthorityRegistry:
    """Authority with the first two sessions registered and sealed."""
    registry.register_participants([s.public_key for s in sessions[:2]])
    return registry
