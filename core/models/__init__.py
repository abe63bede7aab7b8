"""Core domain models."""

from core.models.invoice import (
    PaymentMethod,
    ProviderPaymentMethod,
    InvoiceRequest,
    PaymentMethodEntry,
    InvoiceCreationResult,
    sanitize_metadata,
)
from core.models.status import InvoiceStatus, StatusView, normalize_status
from core.models.webhook import WebhookEvent, WebhookEventType

__all__ = [
    # Invoice
    "PaymentMethod", "ProviderPaymentMethod", "InvoiceRequest",
    "PaymentMethodEntry", "InvoiceCreationResult", "sanitize_metadata",
    # Status
    "InvoiceStatus", "StatusView", "normalize_status",
    # Webhook
    "WebhookEvent", "WebhookEventType",
]
