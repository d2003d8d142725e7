"""Configuration management for the Fernet Locksmith system."""

import os
from dataclasses import dataclass, field
from typing import Optional

from fernet_locksmith.constants import Constants
from fernet_locksmith.exceptions import ValidationError
from fernet_locksmith.validation_utils import validate_key_path, validate_vault_address


@dataclass
class LockSmithConfig:
    """Configuration for LockSmith instances."""

    # Vault settings, addresses in rotation order
    vault_addresses: list[str] = field(default_factory=list)
    vault_token: Optional[str] = None
    key_path: str = Constants.DEFAULT_KEY_PATH()
    timeout: int = Constants.DEFAULT_VAULT_TIMEOUT()  # seconds
    verify: bool = True

    # Rotation settings
    ttl: int = Constants.DEFAULT_TTL()  # seconds
    interval: Optional[int] = None  # seconds, defaults to ttl

    # Bootstrap settings
    period: int = Constants.DEFAULT_PERIOD()  # seconds
    num_keys: int = Constants.DEFAULT_NUM_KEYS()

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.vault_addresses:
            raise ValidationError("At least one Vault address is required")
        for address in self.vault_addresses:
            validate_vault_address(address)
        if len(set(self.vault_addresses)) != len(self.vault_addresses):
            raise ValidationError("Vault addresses must be unique")

        validate_key_path(self.key_path)

        if self.timeout < 1:
            raise ValidationError("timeout must be at least 1 second")
        if self.ttl < 1:
            raise ValidationError("ttl must be at least 1 second")
        if self.interval is None:
            self.interval = self.ttl
        elif self.interval < 1:
            raise ValidationError("interval must be at least 1 second")
        if self.period < 1:
            raise ValidationError("period must be at least 1 second")
        if self.num_keys < Constants.MIN_KEYS():
            raise ValidationError(f"num_keys must be at least {Constants.MIN_KEYS()}")

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "LockSmithConfig":
        """Build a configuration from environment variables.

        ``VAULT_ADDR`` may hold a comma-separated list of addresses.

        Raises:
            ValidationError: If a value is missing or malformed
        """
        if environ is None:
            environ = dict(os.environ)

        addresses = [
            a.strip()
            for a in environ.get(Constants.VAULT_ADDRESS_ENV(), "").split(",")
            if a.strip()
        ]

        return cls(
            vault_addresses=addresses,
            vault_token=environ.get(Constants.DEFAULT_TOKEN_ENV()),
            key_path=environ.get("LOCKSMITH_KEY_PATH", Constants.DEFAULT_KEY_PATH()),
            ttl=_env_int(environ, "LOCKSMITH_TTL", Constants.DEFAULT_TTL()),
            interval=_env_int(environ, "LOCKSMITH_INTERVAL", None),
            period=_env_int(environ, "LOCKSMITH_PERIOD", Constants.DEFAULT_PERIOD()),
            num_keys=_env_int(environ, "LOCKSMITH_NUM_KEYS", Constants.DEFAULT_NUM_KEYS()),
        )


def _env_int(environ: dict[str, str], name: str, default: Optional[int]) -> Optional[int]:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer, got {value!r}") from e
