import pytest

from blindwage.config import (
    DEFAULT_PARAMS,
    HASH_BITS,
    KEY_BITS,
    ProtocolParams,
    ProtocolSettings,
)


def test_defaults():
    assert DEFAULT_PARAMS.key_bits == KEY_BITS == 2048
    assert DEFAULT_PARAMS.hash_bits == HASH_BITS == 1536
    assert DEFAULT_PARAMS.hash_bytes == 192


def test_for_key_bits_uses_three_quarters():
    p = ProtocolParams.for_key_bits(3072)
    assert p.key_bits == 3072
    assert p.hash_bits == 2304


@pytest.mark.parametrize("kwargs", [
    {"key_bits": 512, "hash_bits": 256},
    {"key_bits": 2048, "hash_bits": 1535},
    {"key_bits": 2048, "hash_bits": 128},
    {"key_bits": 2048, "hash_bits": 2048},
    {"key_bits": 2048, "hash_bits": 1536, "public_exponent": 4},
])
def test_invalid_params_rejected(kwargs):
    with pytest.raises(ValueError):
        ProtocolParams(**kwargs)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("KEY_BITS", "HASH_BITS", "PUBLIC_EXPONENT"):
        monkeypatch.delenv(f"BLINDWAGE_{name}", raising=False)
    return monkeypatch


def test_from_env_defaults(clean_env):
    assert ProtocolParams.from_env() == ProtocolParams()


def test_from_env_key_only_follows_hash_rule(clean_env):
    clean_env.setenv("BLINDWAGE_KEY_BITS", "3072")
    p = ProtocolParams.from_env()
    assert p == ProtocolParams(key_bits=3072, hash_bits=2304)


def test_from_env_both(clean_env):
    clean_env.setenv("BLINDWAGE_KEY_BITS", "1024")
    clean_env.setenv("BLINDWAGE_HASH_BITS", "512")
    p = ProtocolParams.from_env()
    assert p.key_bits == 1024
    assert p.hash_bits == 512


def test_settings_init_overrides(clean_env):
    settings = ProtocolSettings(key_bits=4096)
    assert settings.to_params() == ProtocolParams(key_bits=4096, hash_bits=3072)


@pytest.mark.parametrize("env", [
    {"BLINDWAGE_KEY_BITS": "lots"},
    {"BLINDWAGE_KEY_BITS": "512"},
    {"BLINDWAGE_KEY_BITS": "2048", "BLINDWAGE_HASH_BITS": "2048"},
])
def test_from_env_rejects_bad_values(clean_env, env):
    for name, value in env.items():
        clean_env.setenv(name, value)
    with pytest.raises(ValueError):
        ProtocolParams.from_env()
