"""
Domain events for checkout.

Immutable event objects for invoice lifecycle changes. The invoice and
webhook services publish what happened; handlers react without the
publisher knowing who's listening.

Events carry identifiers and the provider payload so handlers don't need
to call the provider again.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class CheckoutEvent:
    """Base class for all checkout domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class InvoiceEvent(CheckoutEvent):
    """Events related to invoice lifecycle."""
    invoice_id: str | None = None
    order_id: str | None = None


@dataclass(frozen=True)
class InvoiceCreated(InvoiceEvent):
    """Invoice was created at the provider."""
    result: Any = None  # InvoiceCreationResult

    @classmethod
    def create(cls, order_id: str, result: Any) -> "InvoiceCreated":
        return cls(invoice_id=result.invoice_id, order_id=order_id, result=result)


@dataclass(frozen=True)
class WebhookInvoiceEvent(InvoiceEvent):
    """Invoice event reported by a verified provider webhook."""
    payload: dict = field(default_factory=dict)

    @classmethod
    def from_webhook(cls, event: Any) -> "WebhookInvoiceEvent":
        return cls(
            invoice_id=event.resolved_invoice_id,
            order_id=event.order_id,
            payload=event.model_dump(),
        )


@dataclass(frozen=True)
class InvoicePaid(WebhookInvoiceEvent):
    """Provider reported the invoice as paid."""


@dataclass(frozen=True)
class InvoiceExpired(WebhookInvoiceEvent):
    """Invoice expired without payment."""


@dataclass(frozen=True)
class InvoiceProcessing(WebhookInvoiceEvent):
    """Payment seen, waiting for confirmations."""


@dataclass(frozen=True)
class UnknownWebhookEvent(WebhookInvoiceEvent):
    """Verified webhook of a type this service doesn't act on."""
    event_name: str = ""

    @classmethod
    def from_webhook(cls, event: Any) -> "UnknownWebhookEvent":
        return cls(
            invoice_id=event.resolved_invoice_id,
            order_id=event.order_id,
            event_name=event.type,
            payload=event.model_dump(),
        )
