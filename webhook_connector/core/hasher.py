"""Webhook key generation and salted hashing.

Keys are handed to the tenant exactly once, when the configuration is
created (or its key is rotated by an update).  Only the salted SHA-256
hash is stored.  The salt is the configuration id, so a hash copied onto
another configuration does not verify there.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def generate_key(length: int = 24) -> str:
    """Return a random hex key of exactly *length* characters."""
    if length <= 0:
        raise ValueError(f"key length must be positive, got {length}")
    return secrets.token_hex((length + 1) // 2)[:length]


def create_key_hash(salt: str, key: str) -> str:
    """SHA-256 hex of ``salt + key``."""
    return sha256_hex((salt + key).encode("utf-8"))


def check_key(salt: str, key: str | None, key_hash: str) -> bool:
    """Return ``True`` if *key* hashes to *key_hash* under *salt*.

    A missing key never verifies.  The comparison is constant time.
    """
    if not key or not key_hash:
        return False
    return hmac.compare_digest(create_key_hash(salt, key), key_hash)
