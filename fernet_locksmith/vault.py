"""Vault backend access for the key set."""

import logging
from typing import Any, Optional

import hvac

from fernet_locksmith.config import LockSmithConfig
from fernet_locksmith.constants import Constants
from fernet_locksmith.exceptions import ReadError, VaultConnectionError, WriteError

logger = logging.getLogger(__name__)


class Vault:
    """One Vault backend holding a copy of the key set.

    Reads and writes go through the logical (path addressed) API of an
    ``hvac.Client``. Request timeouts are the client's business.
    """

    def __init__(
        self,
        address: str,
        token: Optional[str] = None,
        *,
        timeout: int = Constants.DEFAULT_VAULT_TIMEOUT(),
        verify: bool = True,
        client: Optional[hvac.Client] = None
    ):
        """Initialize the Vault backend.

        Args:
            address: Vault server address
            token: Vault token
            timeout: Request timeout in seconds
            verify: Verify TLS certificates
            client: Pre-built hvac client (address and token are then ignored
                for connection purposes)

        Raises:
            VaultConnectionError: If the client cannot be created
        """
        self._address = address
        if client is None:
            try:
                client = hvac.Client(
                    url=address,
                    token=token,
                    timeout=timeout,
                    verify=verify,
                )
            except Exception as e:
                raise VaultConnectionError(f"Cannot create Vault client for {address}: {e}") from e
        self._client = client

    @property
    def name(self) -> str:
        """Backend identity used in logs and errors."""
        return self._address

    @property
    def client(self) -> hvac.Client:
        return self._client

    def is_authenticated(self) -> bool:
        """Check that the token is accepted by this backend.

        Raises:
            VaultConnectionError: If the backend cannot be reached
        """
        try:
            return bool(self._client.is_authenticated())
        except Exception as e:
            raise VaultConnectionError(f"Cannot reach {self.name}: {e}") from e

    def read(self, path: str) -> Optional[dict[str, Any]]:
        """Read the secret stored at path.

        Returns:
            The response payload (secret fields under ``data``), or None if
            nothing is stored at path

        Raises:
            ReadError: If the backend fails
        """
        try:
            return self._client.read(path)
        except Exception as e:
            raise ReadError(f"Error reading {path} from {self.name}: {e}", backend=self.name) from e

    def write(self, path: str, fields: dict[str, Any]) -> None:
        """Overwrite the secret stored at path.

        Raises:
            WriteError: If the backend rejects or fails the write
        """
        try:
            self._client.write_data(path, data=fields)
        except Exception as e:
            raise WriteError(f"Error writing {path} to {self.name}: {e}", backend=self.name) from e

    @classmethod
    def from_config(cls, config: LockSmithConfig) -> list["Vault"]:
        """Build the ordered backend list from a LockSmithConfig."""
        vaults = [
            cls(
                address,
                config.vault_token,
                timeout=config.timeout,
                verify=config.verify,
            )
            for address in config.vault_addresses
        ]
        logger.debug(f"Configured {len(vaults)} Vault backend(s)", extra={
            "backends": [v.name for v in vaults],
        })
        return vaults

    def __repr__(self) -> str:
        return f"Vault({self._address!r})"
