"""
Status reconcilers.

Two interchangeable implementations of the same capability:

- CachedStatusReconciler answers from a StatusStore fed by invoice creation
  and verified webhooks, so a checkout page polling every second doesn't
  turn into a provider call per poll.
- LiveStatusReconciler keeps no state and asks the provider every time.

Which one runs is a deployment choice (CheckoutConfig.status_mode).
"""

import logging
from abc import ABC, abstractmethod

from clients.payment_client import PaymentProviderClient, PaymentProviderError
from core.models import InvoiceStatus, StatusView, WebhookEvent, WebhookEventType, normalize_status
from core.status_store import StatusStore

logger = logging.getLogger(__name__)


class StatusReconciler(ABC):
    """Merges webhook-pushed state and provider queries into one status view."""

    @abstractmethod
    def record_created(self, order_id: str, invoice_id: str) -> None:
        """Note a freshly created invoice."""

    @abstractmethod
    def on_webhook_event(self, event: WebhookEvent) -> None:
        """Apply a verified webhook event. Must be idempotent."""

    @abstractmethod
    def get_status(self, identifier: str) -> StatusView:
        """Status for an order ID or invoice ID. Unknown IDs give 'Not Found'."""


class LiveStatusReconciler(StatusReconciler):
    """Stateless: every status query goes to the provider."""

    def __init__(self, client: PaymentProviderClient):
        self.client = client

    def record_created(self, order_id: str, invoice_id: str) -> None:
        pass

    def on_webhook_event(self, event: WebhookEvent) -> None:
        logger.debug(f"Live status mode, ignoring webhook {event.type} for {event.resolved_invoice_id}")

    def get_status(self, identifier: str) -> StatusView:
        """
        Fetch the invoice and normalize its status.

        An invoice without a status field reports an empty status, not
        Not Found: the invoice exists.

        Raises:
            PaymentProviderError: On any provider failure other than 404,
                including a body that isn't an invoice object
        """
        try:
            invoice = self.client.get_invoice(identifier)
        except PaymentProviderError as e:
            if e.status_code == 404:
                return StatusView.not_found()
            raise

        if not isinstance(invoice, dict):
            raise PaymentProviderError(
                "Invalid response from provider",
                details=f"Expected an invoice object, got {type(invoice).__name__}",
            )

        return StatusView(
            status=normalize_status(invoice.get("status")) or "",
            paid_at=invoice.get("paidAt"),
            amount=invoice.get("amount"),
            currency=invoice.get("currency"),
        )


class CachedStatusReconciler(StatusReconciler):
    """
    Store-backed reconciler.

    Keys:
        status:<order_id>   -> last known status
        invoice:<invoice_id> -> order_id

    Paid webhooks are the only thing that moves a status past New.
    """

    STATUS_PREFIX = "status:"
    INVOICE_PREFIX = "invoice:"

    def __init__(self, store: StatusStore, live: LiveStatusReconciler | None = None):
        """
        Args:
            store: Where statuses live
            live: Optional provider fallback for identifiers the store has never seen
        """
        self.store = store
        self.live = live

    def _status_key(self, order_id: str) -> str:
        return f"{self.STATUS_PREFIX}{order_id}"

    def _invoice_key(self, invoice_id: str) -> str:
        return f"{self.INVOICE_PREFIX}{invoice_id}"

    def record_created(self, order_id: str, invoice_id: str) -> None:
        self.store.set(self._status_key(order_id), InvoiceStatus.NEW.value)
        if invoice_id:
            self.store.set(self._invoice_key(invoice_id), order_id)

    def on_webhook_event(self, event: WebhookEvent) -> None:
        """
        Mark the order paid on a paid event. Other event types don't write.

        Falls back to the invoice alias when the payload carries no order ID.
        """
        if event.event_type != WebhookEventType.PAID:
            return

        invoice_id = event.resolved_invoice_id
        order_id = event.order_id
        if order_id is None and invoice_id:
            order_id = self.store.get(self._invoice_key(invoice_id))

        if order_id is None:
            logger.warning(f"Paid webhook without a known order ID (invoice={invoice_id})")
            return

        self.store.set(self._status_key(order_id), InvoiceStatus.PAID.value)
        if invoice_id:
            self.store.set(self._invoice_key(invoice_id), order_id)
        logger.info(f"Order {order_id} marked Paid (invoice={invoice_id})")

    def get_status(self, identifier: str) -> StatusView:
        status = self.store.get(self._status_key(identifier))

        if status is None:
            order_id = self.store.get(self._invoice_key(identifier))
            if order_id is not None:
                status = self.store.get(self._status_key(order_id))

        if status is not None:
            return StatusView(status=status)

        if self.live is not None:
            try:
                return self.live.get_status(identifier)
            except PaymentProviderError as e:
                logger.warning(f"Live status fallback failed for {identifier}: {e.details}")

        return StatusView.not_found()
