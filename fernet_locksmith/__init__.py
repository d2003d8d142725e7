"""Fernet Locksmith - Fernet key rotation across Vault backends.

This package keeps a Fernet key set identical in one or more HashiCorp Vault
backends and rotates it when its age reaches the rotation period.
"""

from fernet_locksmith.config import LockSmithConfig
from fernet_locksmith.exceptions import (
    AbsentError,
    ConsistencyError,
    DivergentKeysError,
    GenerationError,
    IntegrityError,
    IntegrityErrorKind,
    LockSmithError,
    NoKeysFoundError,
    ReadError,
    ValidationError,
    VaultConnectionError,
    WriteError,
)
from fernet_locksmith.locksmith import CycleResult, LockSmith, RunSummary
from fernet_locksmith.models import FernetKeys
from fernet_locksmith.vault import Vault

try:
    from importlib.metadata import version
    __version__ = version("fernet-locksmith")
except Exception:
    __version__ = "unknown"

__all__ = [
    "AbsentError",
    "ConsistencyError",
    "CycleResult",
    "DivergentKeysError",
    "FernetKeys",
    "GenerationError",
    "IntegrityError",
    "IntegrityErrorKind",
    "LockSmith",
    "LockSmithConfig",
    "LockSmithError",
    "NoKeysFoundError",
    "ReadError",
    "RunSummary",
    "ValidationError",
    "Vault",
    "VaultConnectionError",
    "WriteError",
]
