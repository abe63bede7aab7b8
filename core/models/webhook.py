"""Webhook event model.

Providers disagree on field names ('type' vs 'event', 'data' vs 'invoice',
'orderId' vs 'order_id'), so the model accepts each spelling.
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class WebhookEventType(str, Enum):
    """Invoice lifecycle events this service reacts to."""

    PAID = "invoice.paid"
    EXPIRED = "invoice.expired"
    PROCESSING = "invoice.processing"
    UNKNOWN = "unknown"


# Normalized event name -> event type. BTCPay sends CamelCase names.
EVENT_TYPE_MAP = {
    "invoice.paid": WebhookEventType.PAID,
    "invoice.settled": WebhookEventType.PAID,
    "invoicesettled": WebhookEventType.PAID,
    "invoice.expired": WebhookEventType.EXPIRED,
    "invoiceexpired": WebhookEventType.EXPIRED,
    "invoice.processing": WebhookEventType.PROCESSING,
    "invoiceprocessing": WebhookEventType.PROCESSING,
}

_ORDER_ID_KEYS = ("orderId", "order_id")


class WebhookEvent(BaseModel):
    """One webhook delivery. Consumed once, never stored."""

    type: str = Field(..., min_length=1, validation_alias=AliasChoices("type", "event"))
    invoice_id: str | None = Field(None, validation_alias=AliasChoices("invoiceId", "invoice_id"))
    status: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    data: dict[str, Any] | None = Field(None, validation_alias=AliasChoices("data", "invoice"))

    model_config = ConfigDict(extra="allow")

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def event_name(self) -> str:
        """Lower-cased, dot-separated event name ('invoice_paid' -> 'invoice.paid')."""
        return self.type.strip().lower().replace("_", ".")

    @property
    def event_type(self) -> WebhookEventType:
        return EVENT_TYPE_MAP.get(self.event_name, WebhookEventType.UNKNOWN)

    @property
    def order_id(self) -> str | None:
        """Order identifier from top-level metadata, else from the invoice payload's metadata."""
        sources = [self.metadata]
        if self.data and isinstance(self.data.get("metadata"), dict):
            sources.append(self.data["metadata"])

        for metadata in sources:
            for key in _ORDER_ID_KEYS:
                if metadata.get(key):
                    return str(metadata[key])
        return None

    @property
    def resolved_invoice_id(self) -> str | None:
        if self.invoice_id:
            return self.invoice_id
        if self.data:
            value = self.data.get("id") or self.data.get("invoiceId")
            return str(value) if value else None
        return None
