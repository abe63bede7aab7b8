"""
Invoice service for Bitcoin checkout.

Creates the invoice at the provider, then polls its payment methods until
the requested settlement detail (Lightning invoice or on-chain address)
shows up or the poll budget runs out. The provider fills payment methods
in asynchronously: Lightning invoices are there immediately, on-chain
addresses can lag by seconds, hence the asymmetric budget.
"""

import logging
import time
from typing import Callable
from uuid import uuid4

from pydantic import ValidationError

from clients.payment_client import PaymentProviderClient, PaymentProviderError
from core.config import CheckoutConfig
from core.event_bus import EventBus
from core.events import InvoiceCreated
from core.exceptions import InvoiceCreationError
from core.models import (
    InvoiceCreationResult,
    InvoiceRequest,
    PaymentMethod,
    PaymentMethodEntry,
    ProviderPaymentMethod,
)
from utils.timezone import epoch_millis

logger = logging.getLogger(__name__)

DEFAULT_BTC_AMOUNT = "0.00000000"

ONCHAIN_UNAVAILABLE_MESSAGE = "On-chain payments not available. Use checkout page or try Lightning."
ONCHAIN_FALLBACK_MESSAGE = "On-chain payments not available. Pay with the Lightning invoice instead."
DETAILS_UNAVAILABLE_MESSAGE = "Payment details not available. Use checkout page."


def generate_order_id() -> str:
    """
    Correlation ID embedded in invoice metadata: order_<epoch ms>_<8 hex>.

    The random suffix keeps orders created in the same millisecond apart;
    they would otherwise share one status entry.
    """
    return f"order_{epoch_millis()}_{uuid4().hex[:8]}"


class InvoiceService:
    """Service for invoice creation."""

    def __init__(
        self,
        client: PaymentProviderClient,
        config: CheckoutConfig,
        event_bus: EventBus,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.config = config
        self.event_bus = event_bus
        self._sleep = sleep

    def checkout_methods(self, payment_method: PaymentMethod) -> list[str]:
        """
        Provider payment methods to enable on the invoice.

        On-chain requests also enable Lightning when fallback_to_lightning is
        on, so there is something to fall back to.
        """
        lightning = ProviderPaymentMethod.LIGHTNING.value
        onchain = ProviderPaymentMethod.ONCHAIN.value

        if payment_method == PaymentMethod.LIGHTNING:
            return [lightning]
        if payment_method == PaymentMethod.ONCHAIN:
            return [onchain, lightning] if self.config.fallback_to_lightning else [onchain]
        return [lightning, onchain]

    def poll_attempts(self, payment_method: PaymentMethod) -> int:
        if payment_method == PaymentMethod.ONCHAIN:
            return self.config.onchain_poll_attempts
        return self.config.lightning_poll_attempts

    def _build_payload(self, request: InvoiceRequest, order_id: str) -> dict:
        checkout = {
            "paymentMethods": self.checkout_methods(request.payment_method),
            "expirationMinutes": self.config.invoice_expiration_minutes,
        }
        if self.config.redirect_url:
            checkout["redirectURL"] = self.config.redirect_url

        return {
            "amount": request.amount_string,
            "currency": request.currency,
            "checkout": checkout,
            "metadata": {
                "orderId": order_id,
                "description": request.metadata_description,
            },
        }

    def create_invoice(self, request: InvoiceRequest) -> InvoiceCreationResult:
        """
        Create an invoice and collect its settlement details.

        Args:
            request: Validated invoice request

        Returns:
            Normalized result. When no usable destination turns up, the result
            says useCheckoutLink instead of failing.

        Raises:
            InvoiceCreationError: If the invoice-create call fails (not retried)
        """
        order_id = generate_order_id()
        payload = self._build_payload(request, order_id)

        logger.info(
            f"Creating {request.payment_method.value} invoice for "
            f"{payload['amount']} {request.currency} (order={order_id})"
        )

        try:
            invoice = self.client.create_invoice(payload)
        except PaymentProviderError as e:
            raise InvoiceCreationError("Failed to create invoice", details=e.details) from e

        invoice_id = invoice.get("id")
        if not invoice_id:
            raise InvoiceCreationError("Failed to create invoice", details="Provider returned no invoice id")

        logger.info(f"Invoice created: {invoice_id}")

        entries = self.fetch_payment_methods(invoice_id, request.payment_method)
        result = self.classify(invoice, order_id, request.payment_method, entries)

        self.event_bus.publish(InvoiceCreated.create(order_id=order_id, result=result))
        return result

    def fetch_payment_methods(
        self,
        invoice_id: str,
        payment_method: PaymentMethod,
    ) -> list[PaymentMethodEntry]:
        """
        Poll payment methods until the requested destination appears.

        Fixed delay between attempts, none before the first. Provider errors
        count as "no data yet" and use up an attempt.

        Returns:
            Entries from the last successful poll (empty if none succeeded)
        """
        attempts = self.poll_attempts(payment_method)
        entries: list[PaymentMethodEntry] = []

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                logger.info(f"Retry {attempt - 1}/{attempts - 1}: waiting {self.config.poll_delay_seconds}s")
                self._sleep(self.config.poll_delay_seconds)

            try:
                raw = self.client.get_payment_methods(invoice_id)
                entries = [PaymentMethodEntry.model_validate(item) for item in raw]
            except (PaymentProviderError, ValidationError) as e:
                logger.warning(f"Fetching payment methods failed (attempt {attempt}/{attempts}): {e}")
                continue

            logger.debug(f"Attempt {attempt}: {len(entries)} payment method(s) for {invoice_id}")

            if _has_requested_destination(entries, payment_method):
                logger.info(f"Payment destination found on attempt {attempt}")
                break

        return entries

    def classify(
        self,
        invoice: dict,
        order_id: str,
        payment_method: PaymentMethod,
        entries: list[PaymentMethodEntry],
    ) -> InvoiceCreationResult:
        """Turn the provider invoice and its payment methods into the checkout result."""
        result = InvoiceCreationResult(
            invoice_id=invoice["id"],
            order_id=order_id,
            checkout_url=invoice.get("checkoutLink") or invoice.get("checkoutURL"),
            expires_at=invoice.get("expirationTime") or invoice.get("expiresAt"),
            status=invoice.get("status"),
        )

        onchain_not_available = (
            payment_method == PaymentMethod.ONCHAIN
            and bool(entries)
            and all(entry.is_lightning for entry in entries)
        )

        for entry in entries:
            if not entry.has_destination:
                continue
            if entry.is_lightning:
                if payment_method in (PaymentMethod.LIGHTNING, PaymentMethod.UNSPECIFIED):
                    result.lightning_invoice = entry.destination
                elif onchain_not_available and self.config.fallback_to_lightning:
                    result.lightning_invoice = entry.destination
                    result.fallback_to_lightning = True
            elif entry.is_onchain:
                result.address = entry.destination
                result.btc_amount = entry.amount or entry.crypto_amount or DEFAULT_BTC_AMOUNT

        if onchain_not_available:
            logger.warning(f"On-chain requested but only Lightning available for {result.invoice_id}")
            result.onchain_not_available = True
            if result.fallback_to_lightning:
                result.message = ONCHAIN_FALLBACK_MESSAGE
            else:
                result.use_checkout_link = True
                result.message = ONCHAIN_UNAVAILABLE_MESSAGE
        elif not result.lightning_invoice and not result.address:
            result.use_checkout_link = True
            result.message = DETAILS_UNAVAILABLE_MESSAGE

        return result


def _has_requested_destination(entries: list[PaymentMethodEntry], payment_method: PaymentMethod) -> bool:
    if payment_method == PaymentMethod.LIGHTNING:
        return any(entry.is_lightning and entry.has_destination for entry in entries)
    if payment_method == PaymentMethod.ONCHAIN:
        return any(entry.is_onchain and entry.has_destination for entry in entries)
    return any(entry.has_destination for entry in entries)
