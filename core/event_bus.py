"""
Event bus for checkout domain events.

Synchronous in-process pub/sub keyed by event class. Subscribing to a base
class (WebhookInvoiceEvent, InvoiceEvent) receives every subclass event, so
one logging handler covers all webhook-driven events without a list of
names to keep in sync.

Handler errors are logged but never propagate: by the time an event is
published the invoice exists or the webhook has been applied, and the
provider must still get its 200.
"""

import logging
from typing import Callable, Dict, List, Type

from core.events import CheckoutEvent

logger = logging.getLogger(__name__)


class EventBus:
    """
    In-process event bus for checkout domain events.

    Handlers for the event's own class run first, then handlers for each
    base class up to CheckoutEvent. Within one class, subscription order.
    """

    def __init__(self):
        self._subscribers: Dict[Type[CheckoutEvent], List[Callable]] = {}

    def subscribe(self, event_type: Type[CheckoutEvent], callback: Callable):
        """
        Subscribe to an event class and all of its subclasses.

        Args:
            event_type: CheckoutEvent subclass (e.g. InvoicePaid, WebhookInvoiceEvent)
            callback: Function to call with the event

        Raises:
            TypeError: If event_type is not a CheckoutEvent class
        """
        if not (isinstance(event_type, type) and issubclass(event_type, CheckoutEvent)):
            raise TypeError(f"Can only subscribe to CheckoutEvent classes, got {event_type!r}")
        self._subscribers.setdefault(event_type, []).append(callback)

    def handlers_for(self, event_type: Type[CheckoutEvent]) -> List[Callable]:
        """Handlers an event of this class would reach, in call order."""
        return [
            callback
            for cls in event_type.__mro__
            if issubclass(cls, CheckoutEvent)
            for callback in self._subscribers.get(cls, [])
        ]

    def publish(self, event: CheckoutEvent):
        """
        Deliver an event to every handler subscribed to its class or a base.

        Args:
            event: CheckoutEvent instance to publish
        """
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug(f"No handlers for {type(event).__name__}")
            return

        for callback in handlers:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s, invoice=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    type(event).__name__,
                    event.event_id,
                    getattr(event, "invoice_id", None),
                )
