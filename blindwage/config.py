"""
Protocol parameters for blindwage.

The authority key size fixes the RSA modulus; the full-domain hash is
expanded to ``HASH_BITS`` so that the hashed value is always strictly
smaller than the modulus and can be blinded directly.

Defaults
--------
    KEY_BITS        = 2048
    HASH_BITS       = 1536     (3/4 of the modulus)
    PUBLIC_EXPONENT = 65537

Both the authority and every participant **must** use the same
``hash_bits``; otherwise unblinded signatures will not verify.

Environment overrides (``ProtocolSettings``, via ``ProtocolParams.from_env``)::

    BLINDWAGE_KEY_BITS=3072
    BLINDWAGE_HASH_BITS=2304
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ── protocol constants ──────────────────────────────────────────────────
KEY_BITS = 2048
HASH_BITS = 1536
PUBLIC_EXPONENT = 65537

MIN_KEY_BITS = 1024
MIN_HASH_BITS = 256          # never shorter than one SHA-256 block


@dataclass(frozen=True)
class ProtocolParams:
    """
    Key and hash sizes shared by the authority and its participants.

    Attributes
    ----------
    key_bits : int
        RSA modulus size for every generated key pair.
    hash_bits : int
        Output length of the full-domain hash.  Must be a multiple of 8
        and strictly smaller than ``key_bits``.
    public_exponent : int
        RSA public exponent used at key generation.
    """

    key_bits: int = KEY_BITS
    hash_bits: int = HASH_BITS
    public_exponent: int = PUBLIC_EXPONENT

    def __post_init__(self) -> None:
        if self.key_bits < MIN_KEY_BITS:
            raise ValueError(
                f"key_bits={self.key_bits} below minimum {MIN_KEY_BITS}"
            )
        if self.hash_bits % 8 != 0:
            raise ValueError("hash_bits must be a multiple of 8")
        if self.hash_bits < MIN_HASH_BITS:
            raise ValueError(
                f"hash_bits={self.hash_bits} below minimum {MIN_HASH_BITS}"
            )
        if self.hash_bits >= self.key_bits:
            raise ValueError(
                f"hash_bits={self.hash_bits} must be smaller than "
                f"key_bits={self.key_bits}"
            )
        if self.public_exponent < 3 or self.public_exponent % 2 == 0:
            raise ValueError("public_exponent must be an odd integer ≥ 3")

    @property
    def hash_bytes(self) -> int:
        return self.hash_bits // 8

    @classmethod
    def for_key_bits(
        cls,
        key_bits: int,
        public_exponent: int = PUBLIC_EXPONENT,
    ) -> ProtocolParams:
        """Parameters with the hash expanded to 3/4 of the modulus."""
        hash_bits = (key_bits * 3 // 4) // 8 * 8
        return cls(
            key_bits=key_bits,
            hash_bits=hash_bits,
            public_exponent=public_exponent,
        )

    @classmethod
    def from_env(cls) -> ProtocolParams:
        """Parameters from ``BLINDWAGE_*`` environment variables."""
        return ProtocolSettings().to_params()


# ── environment settings ────────────────────────────────────────────────

class ProtocolSettings(BaseSettings):
    """
    Environment overrides for ``ProtocolParams``.

    If only ``BLINDWAGE_KEY_BITS`` is set the hash size follows the 3/4
    rule; unset variables fall back to the module defaults.
    """

    model_config = SettingsConfigDict(env_prefix="BLINDWAGE_", frozen=True)

    key_bits: int = KEY_BITS
    hash_bits: Optional[int] = None
    public_exponent: int = PUBLIC_EXPONENT

    @model_validator(mode="after")
    def check_params(self) -> ProtocolSettings:
        self.to_params()
        return self

    def to_params(self) -> ProtocolParams:
        if self.hash_bits is None:
            return ProtocolParams.for_key_bits(
                self.key_bits, self.public_exponent,
            )
        return ProtocolParams(
            key_bits=self.key_bits,
            hash_bits=self.hash_bits,
            public_exponent=self.public_exponent,
        )


DEFAULT_PARAMS = ProtocolParams()
