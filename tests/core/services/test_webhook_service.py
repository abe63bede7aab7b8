"""Tests for WebhookService."""

import json
from unittest.mock import Mock

import pytest

from core.events import InvoiceExpired, InvoicePaid, UnknownWebhookEvent
from core.services.status_service import CachedStatusReconciler, StatusReconciler
from core.services.webhook_service import WebhookService


def _body(payload) -> bytes:
    return json.dumps(payload).encode()


@pytest.fixture
def reconciler(store):
    return CachedStatusReconciler(store)


@pytest.fixture
def service(reconciler, event_bus):
    return WebhookService(reconciler, event_bus)


class TestParse:

    def test_valid_body(self, service):
        event = service.parse(_body({"type": "invoice.paid", "invoiceId": "inv_1"}))
        assert event.resolved_invoice_id == "inv_1"

    @pytest.mark.parametrize("raw", [b"not json", b"", b"\xff\xfe"])
    def test_invalid_json_raises(self, service, raw):
        with pytest.raises(ValueError):
            service.parse(raw)

    def test_non_object_raises(self, service):
        with pytest.raises(ValueError, match="object"):
            service.parse(b"[1, 2]")

    def test_missing_type_raises(self, service):
        with pytest.raises(ValueError):
            service.parse(_body({"invoiceId": "inv_1"}))


class TestHandle:

    def test_paid_updates_store(self, service, reconciler):
        reconciler.record_created("order_1", "inv_1")

        service.handle(_body({"type": "invoice.paid", "invoiceId": "inv_1", "metadata": {"orderId": "order_1"}}))

        assert reconciler.get_status("order_1").status == "Paid"

    def test_publishes_domain_event(self, service, event_bus):
        received = []
        event_bus.subscribe(InvoicePaid, received.append)

        returned = service.handle(_body({"type": "InvoiceSettled", "invoiceId": "inv_1"}))

        assert isinstance(returned, InvoicePaid)
        assert received == [returned]

    def test_expired_publishes_expired(self, service):
        returned = service.handle(_body({"type": "invoice.expired", "invoiceId": "inv_1"}))
        assert isinstance(returned, InvoiceExpired)

    def test_unknown_type_is_accepted(self, service, store):
        returned = service.handle(_body({"type": "InvoiceReceivedPayment", "invoiceId": "inv_1"}))

        assert isinstance(returned, UnknownWebhookEvent)
        assert returned.event_name == "InvoiceReceivedPayment"
        assert len(store) == 0

    def test_redelivery_is_idempotent(self, service, store):
        body = _body({"type": "invoice.paid", "invoiceId": "inv_1", "metadata": {"orderId": "order_1"}})

        service.handle(body)
        snapshot = dict(store._data)
        service.handle(body)

        assert store._data == snapshot

    def test_reconciler_error_propagates(self, event_bus):
        reconciler = Mock(spec=StatusReconciler)
        reconciler.on_webhook_event.side_effect = ConnectionError("store down")
        service = WebhookService(reconciler, event_bus)

        with pytest.raises(ConnectionError):
            service.handle(_body({"type": "invoice.paid", "invoiceId": "inv_1"}))

    def test_malformed_body_does_not_touch_reconciler(self, event_bus):
        reconciler = Mock(spec=StatusReconciler)
        service = WebhookService(reconciler, event_bus)

        with pytest.raises(ValueError):
            service.handle(b"{broken")

        reconciler.on_webhook_event.assert_not_called()
