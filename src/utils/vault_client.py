"""
Vault Client Utility for stream-diff

Reads secrets (currently the online pattern detector's API key) from a
HashiCorp Vault KV v2 engine.
"""

import os
from typing import Dict, Any, Optional
import hvac
from hvac.exceptions import VaultError, InvalidPath
import logging

logger = logging.getLogger(__name__)


class VaultClient:
    """Thin wrapper around hvac for secret lookups."""

    def __init__(
        self,
        vault_url: Optional[str] = None,
        vault_token: Optional[str] = None,
        verify_ssl: bool = True,
        mount_point: str = "secret"
    ):
        """
        Connect to Vault.

        Args:
            vault_url: Vault server URL (defaults to VAULT_ADDR env var)
            vault_token: Authentication token (defaults to VAULT_TOKEN env var)
            verify_ssl: Whether to verify SSL certificates
            mount_point: KV secrets engine mount point

        Raises:
            ValueError: If URL or token are missing
            VaultError: If the connection or authentication fails
        """
        self.vault_url = vault_url or os.getenv("VAULT_ADDR")
        self.vault_token = vault_token or os.getenv("VAULT_TOKEN")
        self.mount_point = mount_point

        if not self.vault_url:
            raise ValueError("Vault URL must be provided via parameter or VAULT_ADDR environment variable")

        if not self.vault_token:
            raise ValueError("Vault token must be provided via parameter or VAULT_TOKEN environment variable")

        try:
            self.client = hvac.Client(
                url=self.vault_url,
                token=self.vault_token,
                verify=verify_ssl
            )

            if not self.client.is_authenticated():
                raise VaultError("Failed to authenticate with Vault")

            logger.info(f"Connected to Vault at {self.vault_url}")

        except Exception as e:
            logger.error(f"Failed to initialize Vault client: {e}")
            raise VaultError(f"Vault initialization failed: {e}") from e

    def get_secret(self, path: str) -> Dict[str, Any]:
        """
        Read a KV v2 secret.

        Args:
            path: Secret path relative to the mount point

        Returns:
            Secret data

        Raises:
            InvalidPath: If nothing is stored at the path
            VaultError: If the read fails
        """
        try:
            logger.debug(f"Reading secret {self.mount_point}/data/{path}")
            response = self.client.secrets.kv.v2.read_secret_version(
                path=path,
                mount_point=self.mount_point
            )

            if not response or "data" not in response:
                raise InvalidPath(f"No data found at path: {path}")

            return response["data"].get("data", {})

        except InvalidPath:
            logger.error(f"Secret not found at path: {path}")
            raise
        except Exception as e:
            logger.error(f"Failed to read secret {path}: {e}")
            raise VaultError(f"Secret retrieval failed: {e}") from e

    def get_api_key(self, path: str, key: str = "api_key") -> str:
        """
        Read an API key stored under a secret.

        Args:
            path: Secret path
            key: Entry inside the secret holding the key

        Returns:
            The API key

        Raises:
            InvalidPath: If the secret or the entry does not exist
        """
        secret = self.get_secret(path)

        value = secret.get(key)
        if not value:
            raise InvalidPath(f"Secret {path} has no '{key}' entry")

        return value

    def close(self):
        self.client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
