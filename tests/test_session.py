import threading

import pytest

from blindwage import session as session_mod
from blindwage.errors import (
    AlreadyBlinded,
    BlindingFailed,
    NotBlinded,
    SignatureMismatch,
    SigningFailed,
)
from blindwage.primitives import self_verify
from blindwage.session import BlindedSubmission, ParticipantSession, SessionState


def test_create_generates_own_key(authority_key, params):
    s = ParticipantSession.create(authority_key.public_key, params)
    assert s.state is SessionState.FRESH
    assert s.public_key.key_size == params.key_bits
    assert s.key_id != authority_key.key_id


def test_blind_produces_self_signed_submission(sessions):
    s = sessions[0]
    sub = s.blind(b"a living wage")
    assert s.state is SessionState.BLINDED
    assert sub.submitter_key_id == s.key_id
    self_verify(sub.blinded, sub.self_signature, s.public_key)


def test_blind_only_once(sessions):
    s = sessions[0]
    s.blind(b"once")
    with pytest.raises(AlreadyBlinded):
        s.blind(b"twice")


def test_latch_consumed_when_signing_fails(sessions, monkeypatch):
    def fail(*args):
        raise SigningFailed("no entropy")

    monkeypatch.setattr(session_mod, "self_sign", fail)
    s = sessions[0]
    with pytest.raises(SigningFailed):
        s.blind(b"value")
    assert s.state is SessionState.BLINDED

    monkeypatch.undo()
    with pytest.raises(AlreadyBlinded):
        s.blind(b"value")
    with pytest.raises(NotBlinded):
        s.unblind(b"\x01" * 128)


def test_latch_consumed_when_blinding_fails(sessions, monkeypatch):
    def fail(*args):
        raise BlindingFailed("bad key")

    monkeypatch.setattr(session_mod, "blind", fail)
    s = sessions[0]
    with pytest.raises(BlindingFailed):
        s.blind(b"value")

    monkeypatch.undo()
    with pytest.raises(AlreadyBlinded):
        s.blind(b"value")


def test_unblind_before_blind(sessions):
    with pytest.raises(NotBlinded):
        sessions[0].unblind(b"\x01" * 128)


def test_unblind_rejects_bogus_signature(sessions):
    s = sessions[0]
    s.blind(b"value")
    with pytest.raises(SignatureMismatch):
        s.unblind(b"\x01" * 128)


def test_factor_discarded_after_failed_unblind(sessions):
    s = sessions[0]
    s.blind(b"value")
    with pytest.raises(SignatureMismatch):
        s.unblind(b"\x01" * 128)
    with pytest.raises(NotBlinded):
        s.unblind(b"\x01" * 128)


def test_same_value_blinds_differently(sessions):
    a = sessions[0].blind(b"Below the glass ceiling")
    b = sessions[1].blind(b"Below the glass ceiling")
    assert a.blinded != b.blinded


def test_submission_dict_roundtrip(sessions):
    sub = sessions[0].blind(b"value")
    restored = BlindedSubmission.from_dict(sub.to_dict())
    assert restored.blinded == sub.blinded
    assert restored.self_signature == sub.self_signature
    assert restored.submitter_key_id == sub.submitter_key_id


@pytest.mark.parametrize("data", [
    {},
    {"blinded": "!!", "self_signature": "", "submitter_public_key": ""},
    {"blinded": "", "self_signature": "", "submitter_public_key": 5},
    {"blinded": 7, "self_signature": "", "submitter_public_key": ""},
])
def test_submission_from_bad_dict(data):
    with pytest.raises(ValueError):
        BlindedSubmission.from_dict(data)


def test_repr(sessions):
    s = sessions[0]
    assert s.fingerprint in repr(s)
    assert "FRESH" in repr(s)


def test_concurrent_blind_single_winner(sessions):
    s = sessions[0]
    submissions = []
    errors = []
    barrier = threading.Barrier(8)

    def attempt(i):
        barrier.wait()
        try:
            submissions.append(s.blind(f"value {i}".encode()))
        except AlreadyBlinded as exc:
            errors.append(exc)

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(submissions) == 1
    assert isinstance(submissions[0], BlindedSubmission)
    assert len(errors) == 7
    assert s.state is SessionState.BLINDED


def test_disclose_packages_original_value(sealed_registry, sessions):
    s = sessions[0]
    blind_sig = sealed_registry.issue_signature(s.blind(b"a living wage"))
    disclosure = s.disclose(blind_sig)
    assert disclosure.value == b"a living wage"
    with pytest.raises(NotBlinded):
        s.disclose(blind_sig)


def test_disclose_before_blind(sessions):
    with pytest.raises(NotBlinded):
        sessions[0].disclose(b"\x01" * 128)
