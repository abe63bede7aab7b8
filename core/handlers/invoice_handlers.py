"""
Handlers for invoice lifecycle events.

On InvoiceCreated, seed the status store so the checkout page's first
polls are answered locally. Lifecycle events from webhooks are logged.
"""

import logging
from typing import Callable

from core.events import InvoiceCreated, InvoiceEvent, UnknownWebhookEvent

logger = logging.getLogger(__name__)


def handle_invoice_created(reconciler) -> Callable:
    """
    Factory that returns an InvoiceCreated handler.

    Args:
        reconciler: StatusReconciler instance

    Returns:
        Handler callable that records the new invoice as New
    """

    def handler(event: InvoiceCreated):
        reconciler.record_created(event.order_id, event.invoice_id)

    return handler


def log_invoice_event(event: InvoiceEvent):
    """Log a webhook-driven invoice event."""
    if isinstance(event, UnknownWebhookEvent):
        logger.info(f"Unknown webhook event type: {event.event_name}")
        return

    logger.info(
        "%s: invoice=%s order=%s",
        event.__class__.__name__,
        event.invoice_id,
        event.order_id,
    )
