"""Reading key sets from Vault backends."""

import logging
from typing import Optional

from fernet_locksmith.exceptions import AbsentError, ReadError
from fernet_locksmith.models import FernetKeys
from fernet_locksmith.vault import Vault

logger = logging.getLogger(__name__)


def read_fernet_keys(vault: Vault, path: str) -> Optional[FernetKeys]:
    """Read the key set stored at path in one backend.

    An empty path is a normal state (nothing bootstrapped yet) and is
    reported as None, not as an error.

    Args:
        vault: Backend to read from
        path: Key path

    Returns:
        The key set, or None if nothing is stored at path

    Raises:
        ReadError: If the backend fails or the payload is malformed
    """
    logger.debug(f"Reading secret in {vault.name}")
    secret = vault.read(path)
    if secret is None:
        return None

    if not isinstance(secret, dict) or not isinstance(secret.get("data"), dict):
        raise ReadError(
            f"Error decoding secret {path} from {vault.name}: missing 'data' mapping",
            backend=vault.name
        )

    try:
        fernet_keys = FernetKeys.from_dict(secret["data"])
    except ReadError as e:
        raise ReadError(
            f"Error decoding secret {path} from {vault.name}: {e}",
            backend=vault.name
        ) from e

    logger.debug(f"Keys read from {vault.name}", extra={
        "backend": vault.name,
        "num_keys": len(fernet_keys.keys) if fernet_keys.keys is not None else 0,
        "creation_time": fernet_keys.creation_time,
        "period": fernet_keys.period,
    })
    return fernet_keys


def require_fernet_keys(vault: Vault, path: str) -> FernetKeys:
    """Read the key set stored at path, which must exist.

    Raises:
        AbsentError: If nothing is stored at path
        ReadError: If the backend fails or the payload is malformed
    """
    fernet_keys = read_fernet_keys(vault, path)
    if fernet_keys is None:
        raise AbsentError(f"No fernet keys in {vault.name}", backend=vault.name)
    return fernet_keys
