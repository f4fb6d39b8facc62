# voting_backend/encryption/password_hashing.py

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError, HashingError

from voting_backend.security.input_validator import InputValidator

# Password hashing and verification for booth accounts and the admin panel, using Argon2id


class PasswordHashingService:
    HASH_PREFIX = '$argon2'

    def __init__(self, validator=None):
        self.ph = PasswordHasher(
            time_cost=3,
            memory_cost=65536,
            parallelism=4,
            hash_len=32,
            salt_len=16,
        )
        self.validator = validator or InputValidator()

    def hash_password(self, password: str, enforce_strength: bool = True) -> str:
        if enforce_strength:
            strength = self.validator.check_password_strength(password)
            if not strength.valid:
                raise ValueError("Password does not meet security requirements: " + "; ".join(strength.errors))
        try:
            return self.ph.hash(password)
        except HashingError as e:
            raise ValueError(f"Password hashing failed: {str(e)}")

    def verify_password(self, password: str, hash_value: str) -> bool:
        try:
            return self.ph.verify(hash_value, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, hash_value: str) -> bool:
        return self.ph.check_needs_rehash(hash_value)

    def is_hash(self, value) -> bool:
        """Stored credentials that are not Argon2 hashes are treated as legacy plaintext."""
        return isinstance(value, str) and value.startswith(self.HASH_PREFIX)
