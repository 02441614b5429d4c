"""
Tests for webhook event parsing and handlers.

Tests cover:
- Metadata extraction from verified events
- Handler registry and dispatch
- checkout.session.completed: user/order resolution, paid flag, receipt
"""

import logging
import uuid

import pytest

from core.services import ServiceResult
from orders.tests.factories import OrderFactory
from payments.exceptions import ReceiptDeliveryError
from payments.webhooks.events import CheckoutWebhookEvent, MissingMetadataError
from payments.webhooks.handlers import (
    ORDER_NOT_FOUND,
    RECEIPT_DELIVERY_FAILED,
    USER_NOT_FOUND,
    WEBHOOK_HANDLERS,
    dispatch_webhook,
    handle_checkout_session_completed,
    register_handler,
)


# =============================================================================
# CheckoutWebhookEvent Tests
# =============================================================================


class TestCheckoutWebhookEvent:
    """Tests for metadata extraction."""

    def test_from_payload(self, checkout_event):
        order_id = uuid.uuid4()

        event = CheckoutWebhookEvent.from_payload(checkout_event(7, order_id))

        assert event.event_id == "evt_test_checkout"
        assert event.event_type == "checkout.session.completed"
        assert event.user_id == "7"
        assert event.order_id == str(order_id)

    @pytest.mark.parametrize(
        "metadata",
        [{}, {"orderId": "abc"}, {"userId": "1"}, {"userId": "", "orderId": "abc"}],
    )
    def test_missing_metadata(self, checkout_event, metadata):
        with pytest.raises(MissingMetadataError, match="No user present in metadata"):
            CheckoutWebhookEvent.from_payload(checkout_event(metadata=metadata))

    def test_missing_data_object(self):
        with pytest.raises(MissingMetadataError):
            CheckoutWebhookEvent.from_payload({"id": "evt_1", "type": "ping"})

    @pytest.mark.parametrize(
        "data",
        ["session", ["cs_1"], {"object": "cs_1"}, {"object": {"metadata": ["1"]}}],
    )
    def test_non_object_data_treated_as_missing(self, data):
        with pytest.raises(MissingMetadataError):
            CheckoutWebhookEvent.from_payload({"id": "evt_1", "data": data})


# =============================================================================
# Registry Tests
# =============================================================================


class TestDispatchWebhook:
    """Tests for the handler registry."""

    def test_checkout_completed_registered(self):
        assert (
            WEBHOOK_HANDLERS["checkout.session.completed"]
            is handle_checkout_session_completed
        )

    def test_unregistered_type_acknowledged(self, checkout_event):
        """Should return success with no data for unknown event types."""
        event = CheckoutWebhookEvent.from_payload(
            checkout_event(1, uuid.uuid4(), event_type="invoice.paid")
        )

        result = dispatch_webhook(event)

        assert result.success is True
        assert result.data is None

    def test_registered_handler_called(self, checkout_event):
        event = CheckoutWebhookEvent.from_payload(
            checkout_event(1, uuid.uuid4(), event_type="test.custom")
        )
        calls = []

        @register_handler("test.custom")
        def handle_custom(received):
            calls.append(received)
            return ServiceResult.ok({"handled": True})

        try:
            result = dispatch_webhook(event)
        finally:
            WEBHOOK_HANDLERS.pop("test.custom")

        assert calls == [event]
        assert result.data == {"handled": True}


# =============================================================================
# checkout.session.completed Tests
# =============================================================================


@pytest.mark.django_db
class TestHandleCheckoutSessionCompleted:
    """Tests for the completed checkout handler."""

    @pytest.fixture
    def order(self, customer, products):
        return OrderFactory(user=customer, products=products)

    def make_event(self, checkout_event, user_id, order_id):
        return CheckoutWebhookEvent.from_payload(checkout_event(user_id, order_id))

    def test_marks_order_paid_and_sends_receipt(
        self, checkout_event, customer, order, mailoutbox
    ):
        result = handle_checkout_session_completed(
            self.make_event(checkout_event, customer.pk, order.id)
        )

        order.refresh_from_db()
        assert order.is_paid is True
        assert result.success is True
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [customer.email]
        assert result.data == {"id": mailoutbox[0].extra_headers["Message-ID"]}

    def test_already_paid_order_stays_paid(
        self, checkout_event, customer, products, mailoutbox
    ):
        """Should converge on paid for replayed events (receipt re-sent)."""
        order = OrderFactory(user=customer, products=products, is_paid=True)
        event = self.make_event(checkout_event, customer.pk, order.id)

        first = handle_checkout_session_completed(event)
        second = handle_checkout_session_completed(event)

        order.refresh_from_db()
        assert order.is_paid is True
        assert first.success and second.success
        assert len(mailoutbox) == 2

    def test_unknown_user(self, checkout_event, order):
        result = handle_checkout_session_completed(
            self.make_event(checkout_event, 999999, order.id)
        )

        order.refresh_from_db()
        assert result.success is False
        assert result.error == "No such user exists."
        assert result.error_code == USER_NOT_FOUND
        assert order.is_paid is False

    def test_non_numeric_user_id(self, checkout_event, order):
        result = handle_checkout_session_completed(
            self.make_event(checkout_event, "abc", order.id)
        )

        assert result.error_code == USER_NOT_FOUND

    def test_user_without_email(self, checkout_event, customer, order):
        """Should treat a user without an email as missing."""
        type(customer).objects.filter(pk=customer.pk).update(email="")

        result = handle_checkout_session_completed(
            self.make_event(checkout_event, customer.pk, order.id)
        )

        assert result.error_code == USER_NOT_FOUND

    def test_unknown_order(self, checkout_event, customer):
        result = handle_checkout_session_completed(
            self.make_event(checkout_event, customer.pk, uuid.uuid4())
        )

        assert result.success is False
        assert result.error == "No such order exists."
        assert result.error_code == ORDER_NOT_FOUND

    def test_malformed_order_id(self, checkout_event, customer):
        result = handle_checkout_session_completed(
            self.make_event(checkout_event, customer.pk, "not-a-uuid")
        )

        assert result.error_code == ORDER_NOT_FOUND

    def test_owner_mismatch_logged(
        self, checkout_event, other_customer, order, mailoutbox, caplog
    ):
        """Should still mark paid but warn when the order has another owner."""
        with caplog.at_level(logging.WARNING):
            result = handle_checkout_session_completed(
                self.make_event(checkout_event, other_customer.pk, order.id)
            )

        order.refresh_from_db()
        assert result.success is True
        assert order.is_paid is True
        assert mailoutbox[0].to == [other_customer.email]
        assert "belongs to a different user" in caplog.text

    def test_receipt_failure_keeps_order_paid(
        self, checkout_event, customer, order, mocker
    ):
        """Should report the delivery failure with the paid flag committed."""
        mocker.patch(
            "payments.webhooks.handlers.ReceiptMailer.send_receipt",
            side_effect=ReceiptDeliveryError("SMTP server unavailable"),
        )

        result = handle_checkout_session_completed(
            self.make_event(checkout_event, customer.pk, order.id)
        )

        order.refresh_from_db()
        assert result.success is False
        assert result.error == "SMTP server unavailable"
        assert result.error_code == RECEIPT_DELIVERY_FAILED
        assert order.is_paid is True
