"""Cross-backend consistency verification."""

from typing import Optional, Sequence

from fernet_locksmith.exceptions import (
    ConsistencyError,
    DivergentKeysError,
    NoKeysFoundError,
)
from fernet_locksmith.models import FernetKeys


def verify_consistency(
    results: Sequence[tuple[str, Optional[FernetKeys]]]
) -> FernetKeys:
    """Verify that every backend holds the same key set.

    Divergence usually means a previous multi-backend write partially
    failed. Which copy is authoritative cannot be inferred, so no repair
    is attempted.

    Args:
        results: ``(backend name, key set or None)`` pairs in configured order

    Returns:
        The reference key set (the first backend's)

    Raises:
        NoKeysFoundError: If any backend holds no keys
        DivergentKeysError: If any key set differs from the first one
        ConsistencyError: If results is empty
    """
    if not results:
        raise ConsistencyError("No backends to verify")

    for name, fernet_keys in results:
        if fernet_keys is None:
            raise NoKeysFoundError(f"No fernet keys in {name}", backend=name)

    reference_name, reference = results[0]
    divergent = [
        name
        for name, fernet_keys in results[1:]
        if not _same_key_set(reference, fernet_keys)
    ]
    if divergent:
        raise DivergentKeysError(
            f"Keys are not identical in each backend: {', '.join(divergent)} "
            f"differ from {reference_name}",
            backends=[reference_name] + divergent
        )

    return reference


def _same_key_set(a: FernetKeys, b: FernetKeys) -> bool:
    return (
        a.keys == b.keys
        and a.creation_time == b.creation_time
        and a.period == b.period
    )
