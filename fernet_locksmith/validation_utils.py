"""Validation utilities for the locksmith package."""

from typing import TYPE_CHECKING
from urllib.parse import urlparse

from fernet_locksmith.constants import Constants
from fernet_locksmith.exceptions import (
    IntegrityError,
    IntegrityErrorKind,
    ValidationError,
)

if TYPE_CHECKING:
    from fernet_locksmith.models import FernetKeys


def check_keys_integrity(fernet_keys: "FernetKeys") -> None:
    """Check the structural integrity of a key set.

    Must pass before a freshly read key set is trusted and before any
    rotation decision is taken. Zero creation time or period means the key
    set was never initialized.

    Args:
        fernet_keys: Key set to check

    Raises:
        IntegrityError: With the kind of the first defect found
    """
    if fernet_keys.keys is None:
        raise IntegrityError(
            "Keys list is missing",
            kind=IntegrityErrorKind.KEYS_MISSING
        )

    if len(fernet_keys.keys) < Constants.MIN_KEYS():
        raise IntegrityError(
            f"Not enough keys: {len(fernet_keys.keys)} found, "
            f"at least {Constants.MIN_KEYS()} required",
            kind=IntegrityErrorKind.TOO_FEW_KEYS
        )

    if not fernet_keys.creation_time:
        raise IntegrityError(
            "Creation time is missing",
            kind=IntegrityErrorKind.MISSING_CREATION_TIME
        )

    if not fernet_keys.period:
        raise IntegrityError(
            "Period is missing",
            kind=IntegrityErrorKind.MISSING_PERIOD
        )


def validate_vault_address(address: str) -> None:
    """Validate a Vault server address.

    Args:
        address: Address such as ``https://vault.example.com:8200``

    Raises:
        ValidationError: If the address is not an http(s) URL
    """
    if address is None:
        raise ValidationError("Vault address cannot be None")

    if address.strip() == "":
        raise ValidationError("Vault address cannot be empty")

    parsed = urlparse(address)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid Vault address: {address}")


def validate_key_path(key_path: str) -> None:
    """Validate the Vault path the key set is stored at."""
    if key_path is None:
        raise ValidationError("Key path cannot be None")

    if key_path.strip("/ \t") == "":
        raise ValidationError("Key path cannot be empty")

    if '\x00' in key_path:
        raise ValidationError("Key path cannot contain null bytes")
