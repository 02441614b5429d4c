"""
Pytest fixtures for payment tests.

Sections:
    - Account, Product and Client Fixtures
    - Gateway Settings Fixtures
    - Mock Stripe Response Fixtures
    - Mock Stripe Error Fixtures
    - Webhook Fixtures
"""

import json
from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest
import stripe
from rest_framework.test import APIClient

from authentication.tests.factories import AdminUserFactory, UserFactory
from payments.tests.helpers import WEBHOOK_SECRET, sign_payload
from products.tests.factories import ProductFactory


# =============================================================================
# Account, Product and Client Fixtures
# =============================================================================


@pytest.fixture
def customer(db):
    return UserFactory()


@pytest.fixture
def other_customer(db):
    return UserFactory()


@pytest.fixture
def admin_user(db):
    return AdminUserFactory()


@pytest.fixture
def products(db):
    """Three billable products in a known order."""
    return ProductFactory.create_batch(3)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    """Return an API client authenticated as the given user."""

    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _client_for


# =============================================================================
# Gateway Settings Fixtures
# =============================================================================


@pytest.fixture
def stripe_enabled(settings):
    """Configure a Stripe secret so get_payment_gateway() returns the adapter."""
    settings.STRIPE_SECRET_KEY = "sk_test_checkout"
    settings.STRIPE_WEBHOOK_SECRET = WEBHOOK_SECRET
    settings.STRIPE_PLATFORM_FEE_PRICE_ID = "price_platform_fee"
    settings.STRIPE_PAYMENT_METHOD_TYPES = ["card", "paypal"]
    settings.PUBLIC_SERVER_URL = "https://shop.example"
    return settings


@pytest.fixture
def stripe_disabled(settings):
    settings.STRIPE_SECRET_KEY = ""
    settings.PUBLIC_SERVER_URL = "https://shop.example"
    return settings


# =============================================================================
# Mock Stripe Response Fixtures
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with attribute access."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)


@pytest.fixture
def mock_checkout_session():
    """Create a mock Checkout Session response."""

    def _create(
        id: str = "cs_test_a1b2c3",
        url: str = "https://checkout.stripe.com/c/pay/cs_test_a1b2c3",
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "checkout.session",
                "url": url,
                "metadata": metadata or {},
            }
        )

    return _create


@pytest.fixture
def mock_stripe_checkout_session(mock_checkout_session):
    """Mock stripe.checkout.Session API."""
    with patch("stripe.checkout.Session") as mock:
        mock.create.return_value = mock_checkout_session()
        yield mock


@pytest.fixture
def mock_stripe_http_client():
    """Mock stripe.RequestsClient."""
    with patch("stripe.RequestsClient") as mock:
        yield mock


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such price: 'price_missing'",
        param: str | None = "line_items[0][price]",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(message=message, param=param, code=code)

    return _create


@pytest.fixture
def rate_limit_error():
    return stripe.RateLimitError(
        message="Too many requests hit the API too quickly.",
    )


@pytest.fixture
def api_connection_error():
    return stripe.APIConnectionError(message="Could not connect to Stripe.")


@pytest.fixture
def api_error():
    return stripe.APIError(message="Something went wrong on Stripe's end.")


@pytest.fixture
def authentication_error():
    return stripe.AuthenticationError(message="Invalid API Key provided.")


# =============================================================================
# Webhook Fixtures
# =============================================================================


@pytest.fixture
def checkout_event():
    """Build a checkout.session.completed event dict."""

    def _create(
        user_id: Any = None,
        order_id: Any = None,
        event_type: str = "checkout.session.completed",
        metadata: dict | None = None,
    ) -> dict[str, Any]:
        if metadata is None:
            metadata = {"userId": str(user_id), "orderId": str(order_id)}
        return {
            "id": "evt_test_checkout",
            "object": "event",
            "type": event_type,
            "data": {
                "object": {
                    "id": "cs_test_a1b2c3",
                    "object": "checkout.session",
                    "metadata": metadata,
                }
            },
        }

    return _create


@pytest.fixture
def signed_webhook():
    """
    Serialize an event and sign it with the test webhook secret.

    Returns (payload_bytes, signature_header).
    """

    def _create(event: Any, secret: str = WEBHOOK_SECRET) -> tuple[bytes, str]:
        payload = json.dumps(event).encode("utf-8")
        return payload, sign_payload(payload, secret=secret)

    return _create
