# Infrastructure clients
from clients.payment_client import PaymentProviderClient, PaymentProviderError
from clients.vault_client import (
    VaultClient,
    get_provider_secrets,
    vault_enabled,
)
