"""Custom exceptions for the Fernet Locksmith system."""

from enum import Enum
from typing import Optional


class LockSmithError(Exception):
    """Base exception for all Locksmith errors."""


class ValidationError(LockSmithError):
    """Raised when configuration or command-line input is invalid."""


class VaultConnectionError(LockSmithError):
    """Raised when a Vault client cannot be created or authenticated."""


class GenerationError(LockSmithError):
    """Raised when Fernet key material cannot be generated."""


class ReadError(LockSmithError):
    """Raised when a backend cannot be read or returns a malformed payload."""

    def __init__(self, message: str, *, backend: Optional[str] = None):
        super().__init__(message)
        self.backend = backend


class AbsentError(LockSmithError):
    """Raised when no keys are stored at the key path of a backend."""

    def __init__(self, message: str, *, backend: Optional[str] = None):
        super().__init__(message)
        self.backend = backend


class ConsistencyError(LockSmithError):
    """Raised when the configured backends do not agree on the key set."""


class NoKeysFoundError(ConsistencyError):
    """Raised when at least one backend holds no keys."""

    def __init__(self, message: str, *, backend: str):
        super().__init__(message)
        self.backend = backend


class DivergentKeysError(ConsistencyError):
    """Raised when backends hold different key sets."""

    def __init__(self, message: str, *, backends: list[str]):
        super().__init__(message)
        self.backends = list(backends)


class IntegrityErrorKind(Enum):
    """Structural defects detected by the integrity check."""

    KEYS_MISSING = "keys_missing"
    TOO_FEW_KEYS = "too_few_keys"
    MISSING_CREATION_TIME = "missing_creation_time"
    MISSING_PERIOD = "missing_period"


class IntegrityError(LockSmithError):
    """Raised when a key set is structurally invalid."""

    def __init__(self, message: str, *, kind: IntegrityErrorKind):
        super().__init__(message)
        self.kind = kind


class WriteError(LockSmithError):
    """Raised when a backend rejects or fails a write.

    ``written`` lists the backends that were written before the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        backend: Optional[str] = None,
        written: Optional[list[str]] = None
    ):
        super().__init__(message)
        self.backend = backend
        self.written = list(written or [])
