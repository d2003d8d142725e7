"""Writing key sets to Vault backends."""

import logging
from typing import Any, Sequence

from fernet_locksmith.exceptions import WriteError
from fernet_locksmith.models import FernetKeys
from fernet_locksmith.vault import Vault

logger = logging.getLogger(__name__)


def build_secret_payload(fernet_keys: FernetKeys, ttl: int) -> dict[str, Any]:
    """Build the fields written to Vault for a key set."""
    payload = fernet_keys.to_dict()
    payload["ttl"] = f"{ttl}s"
    return payload


def write_fernet_keys(
    vaults: Sequence[Vault],
    path: str,
    fernet_keys: FernetKeys,
    ttl: int
) -> list[str]:
    """Write a key set to every backend, one after the other.

    The first failure stops the sequence. Backends already written keep the
    new key set and the others keep the old one; the next consistency check
    reports that divergence.

    Args:
        vaults: Backends in configured order
        path: Key path
        fernet_keys: Key set to write
        ttl: TTL hint in seconds

    Returns:
        Names of the backends written

    Raises:
        WriteError: Naming the failed backend and those already written
    """
    payload = build_secret_payload(fernet_keys, ttl)
    written: list[str] = []

    for vault in vaults:
        logger.info(f"Writing keys to {vault.name}")
        try:
            vault.write(path, payload)
        except WriteError as e:
            raise WriteError(
                f"Error writing keys to {vault.name}: {e}",
                backend=vault.name,
                written=written
            ) from e
        written.append(vault.name)
        logger.debug(f"Keys written to {vault.name}")

    return written
