"""Invoice domain models.

Amounts travel as decimal strings, the form the provider expects. Field
aliases follow the provider's and the checkout page's camelCase JSON.
"""

import re
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DESCRIPTION = "Payment"

_WHITESPACE = re.compile(r"\s+")
_METADATA_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_metadata(value: str) -> str:
    """
    Make a free-text value safe for provider metadata.

    Whitespace runs become '_', then anything outside [A-Za-z0-9_-] is dropped.
    """
    return _METADATA_UNSAFE.sub("", _WHITESPACE.sub("_", value))


class PaymentMethod(str, Enum):
    """Settlement method requested by the checkout page."""

    LIGHTNING = "lightning"
    ONCHAIN = "onchain"
    UNSPECIFIED = "unspecified"


class ProviderPaymentMethod(str, Enum):
    """Payment method identifiers in the provider's vocabulary."""

    LIGHTNING = "BTC-LightningNetwork"
    ONCHAIN = "BTC-Onchain"


class InvoiceRequest(BaseModel):
    """Data required to create an invoice."""

    amount: Decimal = Field(..., gt=0)
    currency: str = Field(..., min_length=1, max_length=10)
    description: str | None = Field(None, max_length=500)
    payment_method: PaymentMethod = Field(PaymentMethod.UNSPECIFIED, alias="paymentMethod")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("currency must not be blank")
        return value

    @field_validator("payment_method", mode="before")
    @classmethod
    def _default_payment_method(cls, value: Any) -> Any:
        if value is None or value == "":
            return PaymentMethod.UNSPECIFIED
        return value

    @property
    def amount_string(self) -> str:
        """Amount as a plain decimal string (no exponent)."""
        return format(self.amount, "f")

    @property
    def metadata_description(self) -> str:
        """Description sanitized for provider metadata."""
        return sanitize_metadata(self.description or DEFAULT_DESCRIPTION) or DEFAULT_DESCRIPTION


class PaymentMethodEntry(BaseModel):
    """One settlement option of an invoice, as returned by the provider."""

    payment_method: str = Field(..., alias="paymentMethod")
    destination: str | None = None
    amount: str | None = None
    crypto_amount: str | None = Field(None, alias="cryptoAmount")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("amount", "crypto_amount", mode="before")
    @classmethod
    def _amount_as_string(cls, value: Any) -> Any:
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        return value

    @property
    def is_lightning(self) -> bool:
        return self.payment_method == ProviderPaymentMethod.LIGHTNING.value

    @property
    def is_onchain(self) -> bool:
        return self.payment_method == ProviderPaymentMethod.ONCHAIN.value

    @property
    def has_destination(self) -> bool:
        return bool(self.destination)


class InvoiceCreationResult(BaseModel):
    """
    Normalized result of invoice creation.

    Same shape whichever branch produced it; unset optionals are dropped
    from the JSON body.
    """

    invoice_id: str = Field(..., alias="invoiceId")
    order_id: str | None = Field(None, alias="orderId")
    checkout_url: str | None = Field(None, alias="checkoutURL")
    expires_at: Any = Field(None, alias="expiresAt")
    status: str | None = None
    lightning_invoice: str | None = Field(None, alias="lightningInvoice")
    address: str | None = None
    btc_amount: str | None = Field(None, alias="btcAmount")
    use_checkout_link: bool | None = Field(None, alias="useCheckoutLink")
    onchain_not_available: bool | None = Field(None, alias="onchainNotAvailable")
    fallback_to_lightning: bool | None = Field(None, alias="fallbackToLightning")
    message: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
