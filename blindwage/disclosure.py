"""
The published artifact: a value and the authority's unblinded signature.

A disclosure carries nothing about its author.  Anyone holding the
authority's public key can check it came out of an authorised,
single-use issuance.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Dict, Optional

from cryptography.hazmat.primitives.asymmetric import rsa

from .config import DEFAULT_PARAMS, ProtocolParams
from .hash import full_domain_hash
from .primitives import verify_blind_signature


@dataclass(frozen=True)
class Disclosure:
    """An anonymously published ``(value, signature)`` pair."""

    value: bytes
    signature: bytes

    def verify(
        self,
        authority_public_key: rsa.RSAPublicKey,
        params: Optional[ProtocolParams] = None,
    ) -> bool:
        return verify_disclosure(authority_public_key, self, params)

    def to_dict(self) -> Dict[str, str]:
        return {
            "value": base64.b64encode(self.value).decode("ascii"),
            "signature": base64.b64encode(self.signature).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> Disclosure:
        try:
            value = base64.b64decode(data["value"], validate=True)
            signature = base64.b64decode(data["signature"], validate=True)
        except KeyError as exc:
            raise ValueError(f"disclosure missing field {exc}") from exc
        except binascii.Error as exc:
            raise ValueError(f"disclosure is not valid base64: {exc}") from exc
        return cls(value=value, signature=signature)

    def __str__(self) -> str:
        text = self.value.decode("utf-8", errors="replace")
        return f"{text}\n{self.signature.hex()}"


def verify_disclosure(
    authority_public_key: rsa.RSAPublicKey,
    disclosure: Disclosure,
    params: Optional[ProtocolParams] = None,
) -> bool:
    """
    Public verification of a published disclosure.

    ``params`` must carry the same ``hash_bits`` the authority and
    participants used.
    """
    params = params or DEFAULT_PARAMS
    digest = full_domain_hash(disclosure.value, params.hash_bits)
    return verify_blind_signature(
        authority_public_key, digest, disclosure.signature,
    )
