"""Tests for secret hashing and token value generation."""

import pytest

from oauth2_server.clients import validate_secret
from oauth2_server.security import BcryptSecretHasher, UrlSafeTokenGenerator


class TestBcryptSecretHasher:

    def test_hash_is_salted(self, hasher):
        assert hasher.hash("s1") != hasher.hash("s1")

    def test_verify_matching_secret(self, hasher):
        assert hasher.verify("s1", hasher.hash("s1")) is True

    @pytest.mark.parametrize("supplied", ["s2", "S1", "s1 ", "", "s"])
    def test_verify_mutated_secret(self, hasher, supplied):
        assert hasher.verify(supplied, hasher.hash("s1")) is False

    def test_every_single_byte_mutation_fails(self, hasher):
        secret = "correct-horse-battery"
        stored = hasher.hash(secret)
        for i in range(len(secret)):
            mutated = secret[:i] + chr(ord(secret[i]) ^ 0x01) + secret[i + 1:]
            assert hasher.verify(mutated, stored) is False

    def test_verify_accepts_bytes_hash(self, hasher):
        stored = hasher.hash("s1").encode("utf-8")
        assert hasher.verify("s1", stored) is True

    def test_malformed_hash_returns_false(self, hasher):
        assert hasher.verify("s1", "not-a-bcrypt-hash") is False

    def test_empty_hash_returns_false(self, hasher):
        assert hasher.verify("s1", "") is False

    def test_configured_rounds_are_used(self):
        stored = BcryptSecretHasher(rounds=5).hash("s1")
        assert stored.startswith("$2b$05$")


class TestValidateSecret:

    def test_valid_secret(self, hasher, oauth_client):
        assert validate_secret(hasher, oauth_client, "s1") is True

    def test_invalid_secret(self, hasher, oauth_client):
        assert validate_secret(hasher, oauth_client, "s2") is False


class TestUrlSafeTokenGenerator:

    def test_values_are_url_safe(self):
        value = UrlSafeTokenGenerator().generate()
        assert "=" not in value
        assert "+" not in value
        assert "/" not in value

    def test_values_carry_32_bytes(self):
        # 32 bytes of base64url without padding is 43 characters
        assert len(UrlSafeTokenGenerator().generate()) == 43

    def test_values_are_unique(self):
        generator = UrlSafeTokenGenerator()
        values = {generator.generate() for _ in range(1000)}
        assert len(values) == 1000

    def test_rejects_short_sources(self):
        with pytest.raises(ValueError):
            UrlSafeTokenGenerator(nbytes=16)
