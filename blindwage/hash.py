"""
Full-domain hash for blind RSA.

A plain SHA-256 digest covers only 256 bits of a 2048-bit modulus.
Blind RSA needs the hashed value spread across (most of) the modulus,
so the digest is expanded in counter mode:

    FDH(m) = SHA-256(m ‖ 0) ‖ SHA-256(m ‖ 1) ‖ …     truncated to k bits

where each counter is a 4-byte big-endian integer.  With the default
k = 1536 bits the result is always smaller than the modulus.
"""

from __future__ import annotations

import hashlib

_BLOCK_BYTES = hashlib.sha256().digest_size


def full_domain_hash(message: bytes, output_bits: int) -> bytes:
    """
    Expand SHA-256 over *message* to exactly ``output_bits`` bits.

    Pure and deterministic.  ``output_bits`` must be a positive
    multiple of 8.
    """
    if output_bits <= 0 or output_bits % 8 != 0:
        raise ValueError("output_bits must be a positive multiple of 8")
    out_len = output_bits // 8
    blocks = -(-out_len // _BLOCK_BYTES)

    out = bytearray()
    for counter in range(blocks):
        h = hashlib.sha256()
        h.update(message)
        h.update(counter.to_bytes(4, "big"))
        out += h.digest()
    return bytes(out[:out_len])
