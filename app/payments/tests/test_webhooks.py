"""
Tests for the Stripe webhook view.

Tests cover:
- Gateway disabled acknowledgement
- Signature verification
- Metadata requirement
- Event dispatch and HTTP status mapping
"""

import json
import uuid
from unittest.mock import patch

import pytest
from django.test import RequestFactory

from orders.tests.factories import OrderFactory
from payments.exceptions import ReceiptDeliveryError
from payments.webhooks.views import stripe_webhook

WEBHOOK_PATH = "/api/v1/payments/webhooks/stripe/"


# =============================================================================
# Setup
# =============================================================================


@pytest.fixture
def rf():
    """Request factory for creating test requests."""
    return RequestFactory()


@pytest.fixture
def webhook_request(rf, signed_webhook):
    """Build a signed POST to the webhook endpoint."""

    def _create(event, signature: str | None = None):
        payload, valid_signature = signed_webhook(event)
        if signature is None:
            signature = valid_signature
        return rf.post(
            WEBHOOK_PATH,
            data=payload,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=signature,
        )

    return _create


# =============================================================================
# Gateway Disabled Tests
# =============================================================================


class TestStripeWebhookDisabled:
    """Tests for webhooks received while payments are disabled."""

    def test_acknowledged_without_action(
        self, db, stripe_disabled, webhook_request, checkout_event, customer
    ):
        order = OrderFactory(user=customer)
        request = webhook_request(checkout_event(customer.pk, order.id))

        response = stripe_webhook(request)

        order.refresh_from_db()
        assert response.status_code == 200
        assert response.content == b"Stripe is not enabled"
        assert order.is_paid is False

    def test_signature_not_checked(self, stripe_disabled, webhook_request):
        request = webhook_request({"id": "evt_1"}, signature="garbage")

        response = stripe_webhook(request)

        assert response.status_code == 200


# =============================================================================
# Signature and Metadata Tests
# =============================================================================


class TestStripeWebhookRejections:
    """Tests for requests rejected before dispatch."""

    @pytest.fixture(autouse=True)
    def setup_gateway(self, stripe_enabled):
        """Enable the gateway for all tests."""
        pass

    def test_missing_signature_returns_400(self, rf):
        request = rf.post(
            WEBHOOK_PATH,
            data=json.dumps({"id": "evt_test"}),
            content_type="application/json",
        )

        response = stripe_webhook(request)

        assert response.status_code == 400
        assert response.content.startswith(b"Webhook Error: ")

    def test_invalid_signature_returns_400(
        self, db, webhook_request, checkout_event, customer
    ):
        """Should reject the event without touching the order it names."""
        order = OrderFactory(user=customer)
        request = webhook_request(
            checkout_event(customer.pk, order.id),
            signature="t=1700000000,v1=deadbeef",
        )

        response = stripe_webhook(request)

        order.refresh_from_db()
        assert response.status_code == 400
        assert response.content.startswith(b"Webhook Error: ")
        assert order.is_paid is False

    @pytest.mark.parametrize(
        "event",
        [
            {"id": "evt_1", "type": "checkout.session.completed", "data": "oops"},
            {
                "id": "evt_1",
                "type": "checkout.session.completed",
                "data": {"object": ["cs_1"]},
            },
            {
                "id": "evt_1",
                "type": "checkout.session.completed",
                "data": {"object": {"metadata": "userId=1"}},
            },
        ],
    )
    def test_malformed_event_body_returns_400(self, webhook_request, event):
        response = stripe_webhook(webhook_request(event))

        assert response.status_code == 400
        assert response.content == b"Webhook Error: No user present in metadata"

    def test_missing_metadata_returns_400(self, webhook_request, checkout_event):
        request = webhook_request(checkout_event(metadata={}))

        response = stripe_webhook(request)

        assert response.status_code == 400
        assert response.content == b"Webhook Error: No user present in metadata"

    def test_get_not_allowed(self, rf):
        response = stripe_webhook(rf.get(WEBHOOK_PATH))

        assert response.status_code == 405


# =============================================================================
# Dispatch Tests
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookDispatch:
    """Tests for verified events."""

    @pytest.fixture(autouse=True)
    def setup_gateway(self, stripe_enabled):
        """Enable the gateway for all tests."""
        pass

    @pytest.fixture
    def order(self, customer, products):
        return OrderFactory(user=customer, products=products)

    def test_checkout_completed(
        self, webhook_request, checkout_event, customer, order, mailoutbox
    ):
        """Should mark the order paid and return the receipt message id."""
        response = stripe_webhook(
            webhook_request(checkout_event(customer.pk, order.id))
        )

        order.refresh_from_db()
        assert response.status_code == 200
        assert order.is_paid is True
        assert json.loads(response.content) == {
            "data": {"id": mailoutbox[0].extra_headers["Message-ID"]}
        }

    def test_other_event_type_ignored(
        self, webhook_request, checkout_event, customer, order, mailoutbox
    ):
        response = stripe_webhook(
            webhook_request(
                checkout_event(customer.pk, order.id, event_type="payment_intent.created")
            )
        )

        order.refresh_from_db()
        assert response.status_code == 200
        assert order.is_paid is False
        assert mailoutbox == []

    def test_unknown_user_returns_404(self, webhook_request, checkout_event, order):
        response = stripe_webhook(webhook_request(checkout_event(999999, order.id)))

        assert response.status_code == 404
        assert json.loads(response.content) == {"error": "No such user exists."}

    def test_unknown_order_returns_404(self, webhook_request, checkout_event, customer):
        response = stripe_webhook(
            webhook_request(checkout_event(customer.pk, uuid.uuid4()))
        )

        assert response.status_code == 404
        assert json.loads(response.content) == {"error": "No such order exists."}

    def test_receipt_failure_returns_500(
        self, webhook_request, checkout_event, customer, order
    ):
        """Should return 500 while leaving the order paid."""
        with patch(
            "payments.webhooks.handlers.ReceiptMailer.send_receipt",
            side_effect=ReceiptDeliveryError("SMTP server unavailable"),
        ):
            response = stripe_webhook(
                webhook_request(checkout_event(customer.pk, order.id))
            )

        order.refresh_from_db()
        assert response.status_code == 500
        assert json.loads(response.content) == {"error": "SMTP server unavailable"}
        assert order.is_paid is True

    def test_unexpected_mail_backend_error_returns_500(
        self, webhook_request, checkout_event, customer, order
    ):
        """Should answer with a JSON error body whatever the backend raises."""

        class ProviderError(Exception):
            pass

        with patch(
            "toolkit.services.email.EmailMultiAlternatives.send",
            side_effect=ProviderError("provider 502"),
        ):
            response = stripe_webhook(
                webhook_request(checkout_event(customer.pk, order.id))
            )

        order.refresh_from_db()
        assert response.status_code == 500
        assert "provider 502" in json.loads(response.content)["error"]
        assert order.is_paid is True

    def test_replayed_event_is_idempotent(
        self, webhook_request, checkout_event, customer, order, mailoutbox
    ):
        event = checkout_event(customer.pk, order.id)

        first = stripe_webhook(webhook_request(event))
        second = stripe_webhook(webhook_request(event))

        order.refresh_from_db()
        assert first.status_code == second.status_code == 200
        assert order.is_paid is True
        assert len(mailoutbox) == 2
