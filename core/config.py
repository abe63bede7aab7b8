"""Checkout configuration.

Settings come from the environment (a .env file is loaded first). Provider
secrets come from Vault instead when VAULT_ADDR is set. Missing secrets
never stop the process: health reports configured=false and calls that
need them raise ConfigurationError.
"""

import logging
import os
from typing import Literal

import requests
from dotenv import load_dotenv
from hvac.exceptions import VaultError
from pydantic import BaseModel, Field

from clients.vault_client import get_provider_secrets, vault_enabled

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.staging.elenpay.tech"

# Config field -> environment variable
ENV_VARS = {
    "api_url": "ELENPAY_API_URL",
    "api_token": "ELENPAY_API_TOKEN",
    "store_id": "ELENPAY_STORE_ID",
    "webhook_secret": "ELENPAY_WEBHOOK_SECRET",
    "port": "PORT",
    "auth_scheme": "ELENPAY_AUTH_SCHEME",
    "fallback_to_lightning": "FALLBACK_TO_LIGHTNING",
    "status_mode": "STATUS_MODE",
    "valkey_url": "VALKEY_URL",
    "status_ttl_seconds": "STATUS_TTL_SECONDS",
    "signature_header": "WEBHOOK_SIGNATURE_HEADER",
    "redirect_url": "CHECKOUT_REDIRECT_URL",
    "invoice_expiration_minutes": "INVOICE_EXPIRATION_MINUTES",
    "request_timeout_seconds": "ELENPAY_TIMEOUT_SECONDS",
}

SECRET_FIELDS = ("api_token", "store_id", "webhook_secret")

# Missing AppRole settings (ValueError), denied access (PermissionError),
# Vault-side errors and an unreachable Vault
VAULT_FAILURES = (ValueError, PermissionError, VaultError, requests.exceptions.RequestException)


class CheckoutConfig(BaseModel):
    """
    Checkout configuration.

    The polling settings default to the provider's observed behaviour:
    Lightning invoices exist right after creation, on-chain addresses
    can take several seconds.
    """

    # Provider
    api_url: str = Field(default=DEFAULT_API_URL, description="Provider API root")
    api_token: str | None = Field(default=None, description="Store API token")
    store_id: str | None = Field(default=None, description="Provider store ID")
    auth_scheme: Literal["Token", "Bearer"] = Field(
        default="Token",
        description="Authorization header scheme",
    )
    request_timeout_seconds: float = Field(default=10, gt=0, le=60)

    # Webhooks
    webhook_secret: str | None = Field(default=None, description="Shared HMAC secret")
    signature_header: str = Field(
        default="X-Elenpay-Signature",
        description="Header carrying the hex HMAC-SHA256 of the raw body",
    )

    # Invoice creation
    invoice_expiration_minutes: int = Field(default=15, ge=1, le=1440)
    redirect_url: str | None = Field(
        default=None,
        description="Where the hosted checkout page sends the buyer after payment",
    )
    fallback_to_lightning: bool = Field(
        default=False,
        description="Offer the Lightning invoice when on-chain is unavailable",
    )
    poll_delay_seconds: float = Field(default=2.0, ge=0, le=30)
    lightning_poll_attempts: int = Field(default=1, ge=1, le=10)
    onchain_poll_attempts: int = Field(default=5, ge=1, le=20)

    # Status
    status_mode: Literal["cached", "live"] = Field(
        default="cached",
        description="cached: webhook-fed store with live fallback; live: always query provider",
    )
    valkey_url: str | None = Field(
        default=None,
        description="Shared status store; in-process map when unset",
    )
    status_ttl_seconds: int | None = Field(default=None, ge=60)

    # Application
    port: int = Field(default=3000, ge=1, le=65535)

    def missing_settings(self) -> list[str]:
        """Names of required secrets that are not set."""
        return [name for name in SECRET_FIELDS if not getattr(self, name)]

    def missing_provider_settings(self) -> list[str]:
        """Names of settings required to call the provider API."""
        return [name for name in ("api_token", "store_id") if not getattr(self, name)]

    @property
    def is_configured(self) -> bool:
        return not self.missing_settings()


def load_config(env_file: str | None = None) -> CheckoutConfig:
    """
    Build CheckoutConfig from .env, the environment, and optionally Vault.

    Existing environment variables win over the .env file. Unset and empty
    variables fall back to the field defaults. A Vault that can't be reached
    or authenticated against is logged and skipped, so startup never fails
    on it; health then reports whatever is still missing.
    """
    load_dotenv(env_file)

    values = {}
    for field, env_var in ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            values[field] = value

    if vault_enabled():
        try:
            secrets = get_provider_secrets()
        except VAULT_FAILURES as e:
            logger.warning(f"Vault unavailable, using environment settings only: {e}")
        else:
            for field, value in secrets.items():
                if value:
                    values[field] = value

    config = CheckoutConfig(**values)

    missing = config.missing_settings()
    if missing:
        logger.warning(
            "Payment provider not fully configured. Missing: %s",
            ", ".join(ENV_VARS[name] for name in missing),
        )
    else:
        logger.info(f"Payment provider configured for store {config.store_id}")

    return config
