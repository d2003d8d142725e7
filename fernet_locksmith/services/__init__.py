"""Services package for Fernet Locksmith."""

from fernet_locksmith.services.consistency import verify_consistency
from fernet_locksmith.services.scheduler import next_rotation_time, should_rotate
from fernet_locksmith.services.store_reader import read_fernet_keys, require_fernet_keys
from fernet_locksmith.services.store_writer import build_secret_payload, write_fernet_keys

__all__ = [
    "build_secret_payload",
    "next_rotation_time",
    "read_fernet_keys",
    "require_fernet_keys",
    "should_rotate",
    "verify_consistency",
    "write_fernet_keys",
]
