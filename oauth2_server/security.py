"""
Pluggable security primitives.

SecretHasher compares client secrets against stored hashes.
TokenGenerator produces opaque values for codes and tokens.
Alternative backends only need to implement these interfaces.
"""

import secrets
from abc import ABC, abstractmethod

import bcrypt
from loguru import logger

from oauth2_server.config import MIN_TOKEN_BYTES

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


class SecretHasher(ABC):
    """Abstract base class for adaptive, salted secret hashing."""

    @abstractmethod
    def hash(self, secret: str) -> str:
        """Hash a plaintext secret for storage."""
        pass

    @abstractmethod
    def verify(self, secret: str, secret_hash: str) -> bool:
        """Constant-time check of a plaintext secret against a stored hash."""
        pass


class TokenGenerator(ABC):
    """Abstract base class for opaque credential values."""

    @abstractmethod
    def generate(self) -> str:
        """Return a new URL-safe random value."""
        pass


class BcryptSecretHasher(SecretHasher):
    """bcrypt backed secret hashing"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        secret_bytes = secret.encode("utf-8")[:BCRYPT_MAX_BYTES]
        hashed = bcrypt.hashpw(secret_bytes, bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify(self, secret: str, secret_hash: str) -> bool:
        if not secret_hash:
            logger.error("[VERIFY] Stored secret hash is empty")
            return False

        secret_bytes = secret.encode("utf-8")[:BCRYPT_MAX_BYTES]
        if isinstance(secret_hash, bytes):
            hash_bytes = secret_hash
        else:
            hash_bytes = secret_hash.encode("utf-8")

        try:
            return bcrypt.checkpw(secret_bytes, hash_bytes)
        except ValueError as e:
            # Malformed hash (e.g. legacy plaintext column)
            logger.error(f"[VERIFY] Unusable secret hash: {e}")
            return False


class UrlSafeTokenGenerator(TokenGenerator):
    """Random values from the OS CSPRNG, base64url encoded without padding"""

    def __init__(self, nbytes: int = MIN_TOKEN_BYTES):
        if nbytes < MIN_TOKEN_BYTES:
            raise ValueError(f"Token values need at least {MIN_TOKEN_BYTES} random bytes")
        self.nbytes = nbytes

    def generate(self) -> str:
        return secrets.token_urlsafe(self.nbytes)
