"""
PBKDF2 password hashing and session token generation.
"""

import hashlib
import secrets


class PasswordHasher:
    """
    Salted PBKDF2-HMAC-SHA256 hashing with constant-time comparison.
    """

    def __init__(self, iterations: int = 100_000, salt_bytes: int = 16,
                 key_length: int = 32, token_bytes: int = 32):
        self.iterations = iterations
        self.salt_bytes = salt_bytes
        self.key_length = key_length
        self.token_bytes = token_bytes

    def generate_salt(self) -> bytes:
        return secrets.token_bytes(self.salt_bytes)

    def hash_password(self, password: str, salt: bytes) -> bytes:
        """
        Derive the password hash

        Args:
            password: Plain text password
            salt: Per-user random salt

        Returns:
            Derived key of key_length bytes
        """
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt,
            self.iterations,
            dklen=self.key_length
        )

    @staticmethod
    def compare_hashes(hash1: bytes, hash2: bytes) -> bool:
        """Compare two digests without short-circuiting on the first differing byte"""
        if len(hash1) != len(hash2):
            return False

        result = 0
        for a, b in zip(hash1, hash2):
            result |= a ^ b
        return result == 0

    def verify_password(self, password: str, salt: bytes, expected_hash: bytes) -> bool:
        return self.compare_hashes(expected_hash, self.hash_password(password, salt))

    def generate_session_token(self) -> str:
        return secrets.token_hex(self.token_bytes)
