"""Tests for EventBus."""

import logging

import pytest

from core.event_bus import EventBus
from core.events import (
    CheckoutEvent,
    InvoiceCreated,
    InvoiceEvent,
    InvoiceExpired,
    InvoicePaid,
    UnknownWebhookEvent,
    WebhookInvoiceEvent,
)
from core.models import InvoiceCreationResult


# =============================================================================
# FIXTURES: lightweight in-memory stubs, no provider needed
# =============================================================================


@pytest.fixture
def _result():
    return InvoiceCreationResult(
        invoice_id="inv_1",
        order_id="order_1700000000000",
        lightning_invoice="lnbc1",
    )


# =============================================================================
# SUBSCRIBE AND PUBLISH
# =============================================================================


class TestSubscribeAndPublish:

    def test_single_handler_receives_the_exact_event_object(self, _result):
        bus = EventBus()
        received = []
        bus.subscribe(InvoiceCreated, received.append)

        event = InvoiceCreated.create(order_id=_result.order_id, result=_result)
        bus.publish(event)

        assert len(received) == 1
        assert received[0] is event

    def test_handler_can_read_payload_fields(self, _result):
        bus = EventBus()
        invoice_ids = []
        bus.subscribe(InvoiceCreated, lambda e: invoice_ids.append(e.result.invoice_id))

        bus.publish(InvoiceCreated.create(order_id=_result.order_id, result=_result))

        assert invoice_ids == ["inv_1"]

    def test_multiple_handlers_called_in_subscription_order(self, _result):
        bus = EventBus()
        order = []
        bus.subscribe(InvoiceCreated, lambda e: order.append("A"))
        bus.subscribe(InvoiceCreated, lambda e: order.append("B"))
        bus.subscribe(InvoiceCreated, lambda e: order.append("C"))

        bus.publish(InvoiceCreated.create(order_id=_result.order_id, result=_result))

        assert order == ["A", "B", "C"]

    def test_type_isolation_only_matching_subscribers_called(self, _result):
        bus = EventBus()
        created_calls = []
        paid_calls = []
        bus.subscribe(InvoiceCreated, created_calls.append)
        bus.subscribe(InvoicePaid, paid_calls.append)

        bus.publish(InvoiceCreated.create(order_id=_result.order_id, result=_result))

        assert len(created_calls) == 1
        assert paid_calls == []

    def test_no_subscribers_does_not_raise(self):
        bus = EventBus()
        bus.publish(InvoicePaid(invoice_id="inv_1", order_id="order_1"))

    def test_two_publishes_deliver_two_distinct_events(self, _result):
        bus = EventBus()
        received = []
        bus.subscribe(InvoiceCreated, received.append)

        event_1 = InvoiceCreated.create(order_id=_result.order_id, result=_result)
        event_2 = InvoiceCreated.create(order_id=_result.order_id, result=_result)
        bus.publish(event_1)
        bus.publish(event_2)

        assert len(received) == 2
        assert received[0] is event_1
        assert received[1] is event_2
        assert received[0].event_id != received[1].event_id


# =============================================================================
# BASE CLASS SUBSCRIPTIONS
# =============================================================================


class TestBaseClassSubscriptions:

    def test_webhook_base_receives_every_webhook_event(self):
        bus = EventBus()
        received = []
        bus.subscribe(WebhookInvoiceEvent, received.append)

        events = [
            InvoicePaid(invoice_id="inv_1"),
            InvoiceExpired(invoice_id="inv_2"),
            UnknownWebhookEvent(invoice_id="inv_3", event_name="invoice.refunded"),
        ]
        for event in events:
            bus.publish(event)

        assert received == events

    def test_invoice_created_is_not_a_webhook_event(self, _result):
        bus = EventBus()
        received = []
        bus.subscribe(WebhookInvoiceEvent, received.append)

        bus.publish(InvoiceCreated.create(order_id=_result.order_id, result=_result))

        assert received == []

    def test_specific_handlers_run_before_base_handlers(self):
        bus = EventBus()
        order = []
        bus.subscribe(CheckoutEvent, lambda e: order.append("checkout"))
        bus.subscribe(InvoiceEvent, lambda e: order.append("invoice"))
        bus.subscribe(InvoicePaid, lambda e: order.append("paid"))

        bus.publish(InvoicePaid(invoice_id="inv_1"))

        assert order == ["paid", "invoice", "checkout"]

    def test_handler_on_base_and_subclass_runs_once_per_subscription(self):
        bus = EventBus()
        received = []
        bus.subscribe(InvoicePaid, received.append)
        bus.subscribe(WebhookInvoiceEvent, received.append)

        bus.publish(InvoicePaid(invoice_id="inv_1"))
        bus.publish(InvoiceExpired(invoice_id="inv_2"))

        assert [e.invoice_id for e in received] == ["inv_1", "inv_1", "inv_2"]

    def test_handlers_for_lists_call_order(self):
        bus = EventBus()

        def on_paid(event):
            pass

        def on_any(event):
            pass

        bus.subscribe(WebhookInvoiceEvent, on_any)
        bus.subscribe(InvoicePaid, on_paid)

        assert bus.handlers_for(InvoicePaid) == [on_paid, on_any]
        assert bus.handlers_for(InvoiceCreated) == []

    @pytest.mark.parametrize("event_type", ["InvoicePaid", object, InvoicePaid(invoice_id="inv_1")])
    def test_subscribe_rejects_non_event_classes(self, event_type):
        with pytest.raises(TypeError):
            EventBus().subscribe(event_type, print)


# =============================================================================
# HANDLER ERROR ISOLATION
# =============================================================================


class TestHandlerErrorIsolation:

    def test_handler_exception_does_not_propagate(self):
        bus = EventBus()
        bus.subscribe(InvoicePaid, lambda e: (_ for _ in ()).throw(RuntimeError("boom")))

        # Must not raise
        bus.publish(InvoicePaid(invoice_id="inv_1"))

    def test_handler_exception_is_logged_with_event_type_and_event_id(self, caplog):
        bus = EventBus()

        def failing_handler(event):
            raise ValueError("store unavailable")

        bus.subscribe(InvoicePaid, failing_handler)

        with caplog.at_level(logging.ERROR, logger="core.event_bus"):
            event = InvoicePaid(invoice_id="inv_1")
            bus.publish(event)

        assert "store unavailable" in caplog.text
        assert "InvoicePaid" in caplog.text
        assert "failing_handler" in caplog.text
        assert event.event_id in caplog.text
        assert "inv_1" in caplog.text

    def test_second_handler_runs_after_first_handler_raises(self):
        bus = EventBus()
        seen = []

        def failing_handler(event):
            raise RuntimeError("fail")

        bus.subscribe(InvoicePaid, failing_handler)
        bus.subscribe(InvoicePaid, lambda e: seen.append(e.invoice_id))

        bus.publish(InvoicePaid(invoice_id="inv_1"))

        assert seen == ["inv_1"]

    def test_all_handlers_run_even_if_multiple_fail(self):
        bus = EventBus()
        results = []

        bus.subscribe(InvoicePaid, lambda e: (_ for _ in ()).throw(RuntimeError("fail 1")))
        bus.subscribe(InvoicePaid, lambda e: results.append("survived_1"))
        bus.subscribe(InvoicePaid, lambda e: (_ for _ in ()).throw(RuntimeError("fail 2")))
        bus.subscribe(InvoicePaid, lambda e: results.append("survived_2"))

        bus.publish(InvoicePaid(invoice_id="inv_1"))

        assert results == ["survived_1", "survived_2"]
