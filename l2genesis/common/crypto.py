"""
Hashing and address derivation helpers.

- keccak256 hashing
- CREATE contract address derivation
"""

from __future__ import annotations

import rlp
from Crypto.Hash import keccak as _keccak_mod


def keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 hash (NOT SHA3-256)."""
    h = _keccak_mod.new(digest_bits=256)
    h.update(data)
    return h.digest()


def compute_create_address(sender: bytes, nonce: int) -> bytes:
    """Compute the CREATE (nonce-based) contract address.

    The contract address is the last 20 bytes of:
        keccak256(rlp([sender, nonce]))
    """
    if len(sender) != 20:
        raise ValueError(f"Sender must be 20 bytes, got {len(sender)}")
    if nonce < 0:
        raise ValueError(f"Nonce must be non-negative, got {nonce}")
    return keccak256(rlp.encode([sender, nonce]))[12:]
