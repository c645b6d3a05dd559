"""Secret hashing and verification."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Protocol

PBKDF2_ALGORITHM = "sha256"
PBKDF2_ITERATIONS = 120_000
SALT_BYTES = 16
HASH_PREFIX = "pbkdf2_sha256"


class CredentialVerifier(Protocol):
    """Turns a secret into its stored form and checks candidates against it."""

    def hash(self, secret: str) -> str:
        ...

    def verify(self, secret: str, stored: str) -> bool:
        ...


class HashedVerifier:
    """
    Salted PBKDF2-SHA256.

    Stored form: "pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>".
    """

    def __init__(self, iterations: int = PBKDF2_ITERATIONS):
        self.iterations = iterations

    def _digest(self, secret: str, salt: bytes, iterations: int) -> str:
        return hashlib.pbkdf2_hmac(
            PBKDF2_ALGORITHM, secret.encode("utf-8"), salt, iterations
        ).hex()

    def hash(self, secret: str) -> str:
        salt = secrets.token_bytes(SALT_BYTES)
        digest = self._digest(secret, salt, self.iterations)
        return f"{HASH_PREFIX}${self.iterations}${salt.hex()}${digest}"

    def verify(self, secret: str, stored: str) -> bool:
        parts = stored.split("$")
        if len(parts) != 4 or parts[0] != HASH_PREFIX:
            return False
        _, iterations, salt_hex, expected = parts
        try:
            digest = self._digest(secret, bytes.fromhex(salt_hex), int(iterations))
        except ValueError:
            return False
        return hmac.compare_digest(digest, expected)


class PlaintextVerifier:
    """Stores secrets as-is. Only for reproducing the mocked storefront data."""

    def hash(self, secret: str) -> str:
        return secret

    def verify(self, secret: str, stored: str) -> bool:
        return hmac.compare_digest(secret.encode("utf-8"), stored.encode("utf-8"))
