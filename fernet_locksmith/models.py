"""Data models for the Fernet Locksmith system."""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from fernet_locksmith.constants import Constants
from fernet_locksmith.crypto_utils import CryptoUtils
from fernet_locksmith.exceptions import GenerationError, ReadError, ValidationError
from fernet_locksmith.validation_utils import check_keys_integrity

KeyGenerator = Callable[[], str]


@dataclass
class FernetKeys:
    """Rotating Fernet key set and its rotation metadata.

    Position is meaningful: ``keys[0]`` is the staging key, ``keys[1]`` the
    primary key and the last entry the oldest key, dropped on the next
    rotation.
    """

    keys: Optional[list[str]] = field(default=None, repr=False)
    creation_time: int = 0  # Unix seconds of the last rotation
    period: int = 0  # seconds

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "keys": list(self.keys) if self.keys is not None else None,
            "creation_time": self.creation_time,
            "period": self.period,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FernetKeys":
        """Create FernetKeys from the ``data`` mapping stored in Vault.

        Absent fields are left uninitialized so that the integrity check
        reports them.

        Raises:
            ReadError: If a field has the wrong type
        """
        if not isinstance(data, dict):
            raise ReadError(f"Key set must be a mapping, got {type(data).__name__}")

        keys = data.get("keys")
        if keys is not None:
            if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
                raise ReadError("Field 'keys' must be a list of strings")
            keys = list(keys)

        return cls(
            keys=keys,
            creation_time=cls._parse_seconds(data, "creation_time"),
            period=cls._parse_seconds(data, "period"),
        )

    @staticmethod
    def _parse_seconds(data: dict[str, Any], name: str) -> int:
        value = data.get(name)
        if value is None:
            return 0
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            raise ReadError(f"Field '{name}' must be an integer, got {type(value).__name__}")
        return value

    @classmethod
    def generate(
        cls,
        period: int,
        num_keys: int = Constants.DEFAULT_NUM_KEYS(),
        *,
        now: Optional[int] = None,
        generator: Optional[KeyGenerator] = None
    ) -> "FernetKeys":
        """Create a brand new key set.

        Args:
            period: Rotation period in seconds
            num_keys: Number of keys in the set
            now: Creation time (default: current time)
            generator: Key generator (default: CryptoUtils.generate_fernet_key)

        Returns:
            New FernetKeys instance

        Raises:
            ValidationError: If period or num_keys is invalid
            GenerationError: If a key cannot be generated
        """
        if period < 1:
            raise ValidationError("Period must be at least 1 second")
        if num_keys < Constants.MIN_KEYS():
            raise ValidationError(f"A key set needs at least {Constants.MIN_KEYS()} keys")

        if generator is None:
            keys = CryptoUtils.generate_fernet_keys(num_keys)
        else:
            keys = [cls._generate_key(generator) for _ in range(num_keys)]
        return cls(
            keys=keys,
            creation_time=int(time.time()) if now is None else int(now),
            period=period,
        )

    @staticmethod
    def _generate_key(generator: Optional[KeyGenerator]) -> str:
        if generator is None:
            generator = CryptoUtils.generate_fernet_key
        try:
            return generator()
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Error generating key: {e}") from e

    def check_integrity(self) -> None:
        """Check this key set's integrity.

        Raises:
            IntegrityError: If the key set is structurally invalid
        """
        check_keys_integrity(self)

    def rotate(
        self,
        *,
        now: Optional[int] = None,
        generator: Optional[KeyGenerator] = None
    ) -> None:
        """Rotate the key set in place.

        A new staging key is generated and put first, the former staging
        key becomes the primary key, the remaining keys shift down one slot
        and the oldest key is dropped. The key set is left untouched if
        anything fails.

        Args:
            now: Rotation time (default: current time)
            generator: Key generator (default: CryptoUtils.generate_fernet_key)

        Raises:
            IntegrityError: If the key set is not valid for rotation
            GenerationError: If the new staging key cannot be generated
        """
        check_keys_integrity(self)

        new_staging = self._generate_key(generator)
        rotated = [new_staging, self.keys[0]] + self.keys[1:-1]

        self.keys = rotated
        self.creation_time = int(time.time()) if now is None else int(now)
