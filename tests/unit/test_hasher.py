"""Tests for webhook key generation and salted hashing."""

from __future__ import annotations

import hashlib

import pytest

from webhook_connector.core.hasher import check_key, create_key_hash, generate_key


class TestHasher:
    def test_generate_key_length_and_alphabet(self):
        key = generate_key(24)
        assert len(key) == 24
        assert set(key) <= set("0123456789abcdef")

    def test_generate_odd_length(self):
        assert len(generate_key(7)) == 7

    def test_generate_key_rejects_non_positive(self):
        with pytest.raises(ValueError):
            generate_key(0)

    def test_keys_are_random(self):
        assert generate_key() != generate_key()

    def test_hash_is_sha256_of_salt_plus_key(self):
        expected = hashlib.sha256(b"cfg-1" + b"secret").hexdigest()
        assert create_key_hash("cfg-1", "secret") == expected

    def test_check_key(self):
        key_hash = create_key_hash("cfg-1", "secret")
        assert check_key("cfg-1", "secret", key_hash)
        assert not check_key("cfg-1", "wrong", key_hash)
        assert not check_key("cfg-2", "secret", key_hash)
        assert not check_key("cfg-1", None, key_hash)
        assert not check_key("cfg-1", "secret", "")
