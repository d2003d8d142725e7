"""Rotation scheduling based on key set age."""

from fernet_locksmith.models import FernetKeys


def next_rotation_time(fernet_keys: FernetKeys, margin: int) -> int:
    """Time at which the key set becomes due for rotation.

    Rotation is triggered ``margin`` seconds before the nominal end of the
    period so that writes reach every backend before the set expires.
    """
    return fernet_keys.creation_time + fernet_keys.period - margin


def should_rotate(fernet_keys: FernetKeys, now: int, margin: int) -> bool:
    """Return True once ``now`` has reached the rotation time (inclusive)."""
    return now >= next_rotation_time(fernet_keys, margin)
