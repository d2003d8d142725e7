"""Library-wide constants.

These constants centralize tunable values used across modules to keep
behavior consistent and avoid duplication.
"""


class Constants:

    # Key set policy
    _MIN_KEYS: int = 3
    _DEFAULT_NUM_KEYS: int = 3
    _DEFAULT_PERIOD: int = 3600  # seconds
    _DEFAULT_TTL: int = 120  # seconds

    # Vault settings
    _DEFAULT_KEY_PATH: str = "secret/fernet-keys"
    _DEFAULT_VAULT_TIMEOUT: int = 30  # seconds
    _DEFAULT_TOKEN_ENV: str = "VAULT_TOKEN"
    _VAULT_ADDRESS_ENV: str = "VAULT_ADDR"

    @classmethod
    def MIN_KEYS(cls) -> int:
        return cls._MIN_KEYS

    @classmethod
    def DEFAULT_NUM_KEYS(cls) -> int:
        return cls._DEFAULT_NUM_KEYS

    @classmethod
    def DEFAULT_PERIOD(cls) -> int:
        return cls._DEFAULT_PERIOD

    # Shared by the rotation margin and the ttl hint written to Vault
    @classmethod
    def DEFAULT_TTL(cls) -> int:
        return cls._DEFAULT_TTL

    @classmethod
    def DEFAULT_KEY_PATH(cls) -> str:
        return cls._DEFAULT_KEY_PATH

    @classmethod
    def DEFAULT_VAULT_TIMEOUT(cls) -> int:
        return cls._DEFAULT_VAULT_TIMEOUT

    @classmethod
    def DEFAULT_TOKEN_ENV(cls) -> str:
        return cls._DEFAULT_TOKEN_ENV

    @classmethod
    def VAULT_ADDRESS_ENV(cls) -> str:
        return cls._VAULT_ADDRESS_ENV
