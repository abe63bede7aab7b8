"""
Webhook service: apply verified provider notifications.

Signature checking happens before this service is called. Here the raw
body is parsed, the status reconciler is updated (errors propagate so the
provider redelivers), and a domain event is published for anything else
that wants to react.
"""

import json
import logging

from core.event_bus import EventBus
from core.events import (
    InvoiceEvent,
    InvoiceExpired,
    InvoicePaid,
    InvoiceProcessing,
    UnknownWebhookEvent,
)
from core.models import WebhookEvent, WebhookEventType
from core.services.status_service import StatusReconciler

logger = logging.getLogger(__name__)

_DOMAIN_EVENTS = {
    WebhookEventType.PAID: InvoicePaid,
    WebhookEventType.EXPIRED: InvoiceExpired,
    WebhookEventType.PROCESSING: InvoiceProcessing,
    WebhookEventType.UNKNOWN: UnknownWebhookEvent,
}


class WebhookService:
    """Service for webhook processing."""

    def __init__(self, reconciler: StatusReconciler, event_bus: EventBus):
        self.reconciler = reconciler
        self.event_bus = event_bus

    def parse(self, raw_body: bytes) -> WebhookEvent:
        """
        Decode a webhook body.

        Raises:
            ValueError: If the body is not JSON or lacks an event type
                (pydantic.ValidationError is a ValueError)
        """
        try:
            data = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValueError(f"Webhook body is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise ValueError("Webhook body must be a JSON object")

        return WebhookEvent.model_validate(data)

    def handle(self, raw_body: bytes) -> InvoiceEvent:
        """
        Apply one verified webhook delivery.

        Safe to call again for a redelivered event: the reconciler's writes
        are overwrites.

        Returns:
            The domain event that was published
        """
        event = self.parse(raw_body)

        logger.info(
            "Webhook received: type=%s invoice=%s status=%s",
            event.type,
            event.resolved_invoice_id,
            event.status,
        )

        self.reconciler.on_webhook_event(event)

        domain_event = _DOMAIN_EVENTS[event.event_type].from_webhook(event)
        self.event_bus.publish(domain_event)
        return domain_event
