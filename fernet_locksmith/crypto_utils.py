"""Cryptographic utilities for the Fernet Locksmith system."""

from cryptography.fernet import Fernet

from fernet_locksmith.exceptions import GenerationError
from fernet_locksmith.exceptions import ValidationError


class CryptoUtils:
    """Fernet key material helpers."""

    @staticmethod
    def generate_fernet_key() -> str:
        """Generate a new Fernet key.

        Returns:
            URL-safe base64 encoded 32-byte key as a string

        Raises:
            GenerationError: If key generation fails
        """
        try:
            return Fernet.generate_key().decode("ascii")
        except Exception as e:
            raise GenerationError(f"Error generating key: {e}") from e

    @classmethod
    def generate_fernet_keys(cls, count: int) -> list[str]:
        """Generate several Fernet keys.

        Args:
            count: Number of keys to generate

        Returns:
            List of encoded keys

        Raises:
            ValidationError: If count is not positive
            GenerationError: If any key generation fails
        """
        if count < 1:
            raise ValidationError("Key count must be at least 1")
        return [cls.generate_fernet_key() for _ in range(count)]
