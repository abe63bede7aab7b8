"""
HashiCorp Vault client for payment provider secrets.

Optional: only used when VAULT_ADDR is set. Uses AppRole authentication.
All paths scoped to 'checkout/' prefix - no escape to other secrets.
"""

import os
import logging
from typing import Dict

import hvac
from hvac.exceptions import InvalidPath, Unauthorized, Forbidden

logger = logging.getLogger(__name__)

# Project scope - all secrets under this path
_SECRET_PREFIX = "checkout"

PROVIDER_SECRET_FIELDS = ("api_token", "store_id", "webhook_secret")

# Singleton instance and cache
_vault_client_instance: "VaultClient | None" = None
_secret_cache: Dict[str, str] = {}


def _ensure_vault_client() -> "VaultClient":
    global _vault_client_instance
    if _vault_client_instance is None:
        _vault_client_instance = VaultClient()
    return _vault_client_instance


def vault_enabled() -> bool:
    """Whether secrets should come from Vault rather than the environment."""
    return bool(os.getenv("VAULT_ADDR"))


class VaultClient:
    """Vault client with AppRole auth, env-based config, and fail-fast behavior."""

    def __init__(
        self,
        vault_addr: str | None = None,
        vault_namespace: str | None = None,
    ):
        """Initialize with environment variables. Fails fast on missing config."""
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        self.vault_role_id = os.getenv("VAULT_ROLE_ID")
        self.vault_secret_id = os.getenv("VAULT_SECRET_ID")

        if not self.vault_addr:
            raise ValueError("VAULT_ADDR environment variable is required")

        if not self.vault_role_id or not self.vault_secret_id:
            raise ValueError(
                "VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required"
            )

        client_kwargs = {"url": self.vault_addr}
        if self.vault_namespace:
            client_kwargs["namespace"] = self.vault_namespace

        self.client = hvac.Client(**client_kwargs)
        self._authenticate_approle()

        if not self.client.is_authenticated():
            raise PermissionError("Vault authentication failed")

        logger.info(f"Vault client initialized: {self.vault_addr}")

    def _authenticate_approle(self) -> None:
        """Authenticate using AppRole credentials."""
        try:
            auth_response = self.client.auth.approle.login(
                role_id=self.vault_role_id,
                secret_id=self.vault_secret_id,
            )
            self.client.token = auth_response["auth"]["client_token"]
            logger.info("AppRole authentication successful")
        except Exception as e:
            logger.error(f"AppRole authentication failed: {e}")
            raise PermissionError(f"AppRole authentication failed: {e}")

    def read_secret(self, path: str) -> Dict[str, str]:
        """
        Read all fields of a KV v2 secret.

        Path is automatically scoped to 'checkout/' prefix.

        Raises:
            PermissionError: Path not accessible or doesn't exist.
        """
        full_path = f"{_SECRET_PREFIX}/{path}"

        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath:
            logger.error(f"Secret path not found: {full_path}")
            raise PermissionError(f"Secret path '{full_path}' not found in Vault")
        except (Unauthorized, Forbidden) as e:
            logger.error(f"Access denied to secret {full_path}: {e}")
            raise PermissionError(f"Access denied to secret '{full_path}': {e}")

        return response["data"]["data"]


def get_provider_secrets() -> Dict[str, str | None]:
    """Get payment provider credentials from Vault.

    Reads 'checkout/provider' once and caches the result. Fields absent in
    Vault come back as None so the caller can report them as unconfigured.

    Returns:
        Dict with keys: api_token, store_id, webhook_secret
    """
    if all(f"checkout/provider/{field}" in _secret_cache for field in PROVIDER_SECRET_FIELDS):
        return {field: _secret_cache[f"checkout/provider/{field}"] for field in PROVIDER_SECRET_FIELDS}

    client = _ensure_vault_client()
    secret_data = client.read_secret("provider")

    result = {}
    for field in PROVIDER_SECRET_FIELDS:
        value = secret_data.get(field)
        if value:
            _secret_cache[f"checkout/provider/{field}"] = value
        result[field] = value or None

    return result
