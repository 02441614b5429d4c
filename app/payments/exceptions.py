"""
Payment-specific exceptions for checkout operations.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentNotFoundError - Order lookup outside the caller's scope
    ├── PaymentValidationError - Bad checkout input (empty cart, unknown products)
    ├── ReceiptDeliveryError - Receipt email could not be sent
    └── PaymentProcessingError - Payment processing failures
        ├── PaymentGatewayUnavailableError - Gateway failed and degradation is off
        └── StripeError - Base for all Stripe errors
            ├── StripeInvalidRequestError - Invalid request params
            │   └── WebhookSignatureError - Webhook payload failed verification
            ├── StripeAuthenticationError - Bad API key
            ├── StripeRateLimitError - Rate limited
            ├── StripeAPIUnavailableError - API unavailable
            └── StripeTimeoutError - Request timeout

HTTP mapping used by the payment views:
    PaymentValidationError          400
    WebhookSignatureError           400
    PaymentNotFoundError            404
    ReceiptDeliveryError            500
    PaymentGatewayUnavailableError  503

Usage:
    from payments.exceptions import PaymentValidationError

    raise PaymentValidationError(
        "No products were requested",
        error_code="EMPTY_CART",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any


class PaymentError(BaseApplicationError):
    """
    Base exception for payment domain errors.

    All payment-related exceptions inherit from this class,
    enabling catch-all handling for payment operations.
    """

    default_error_code: str = "PAYMENT_ERROR"


class PaymentNotFoundError(PaymentError):
    """
    Raised when an order cannot be found for a payment operation.

    Example:
        raise PaymentNotFoundError(
            f"Order {order_id} not found",
            details={"order_id": str(order_id)}
        )
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"


class PaymentValidationError(PaymentError):
    """Raised when checkout input is unusable. HTTP 400."""

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"


class ReceiptDeliveryError(PaymentError):
    """
    Raised when the receipt for a paid order could not be emailed.

    The order stays paid; only the notification failed.
    """

    default_error_code: str = "RECEIPT_DELIVERY_FAILED"


class PaymentProcessingError(PaymentError):
    """Raised when payment processing fails."""

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"


class PaymentGatewayUnavailableError(PaymentProcessingError):
    """
    Raised when the gateway fails during checkout and the deployment has
    opted out of approving orders without payment. HTTP 503.
    """

    default_error_code: str = "PAYMENT_GATEWAY_UNAVAILABLE"


# =============================================================================
# Stripe Errors
# =============================================================================


class StripeError(PaymentProcessingError):
    """
    Base exception for all Stripe-related errors.

    Carries `stripe_code`, Stripe's internal error code, when one is known.
    """

    default_error_code: str = "STRIPE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code


# -----------------------------------------------------------------------------
# Configuration and Request Errors
# -----------------------------------------------------------------------------


class StripeInvalidRequestError(StripeError):
    """
    Invalid parameters were sent to Stripe.

    Usually a configuration problem (unknown price id, bad URL).
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"


class WebhookSignatureError(StripeInvalidRequestError):
    """The webhook body or its Stripe-Signature header failed verification."""

    default_error_code: str = "WEBHOOK_SIGNATURE_INVALID"


class StripeAuthenticationError(StripeError):
    """The configured secret key was rejected."""

    default_error_code: str = "STRIPE_AUTHENTICATION_FAILED"


# -----------------------------------------------------------------------------
# Availability Errors
# -----------------------------------------------------------------------------


class StripeRateLimitError(StripeError):
    """Too many requests were sent to Stripe."""

    default_error_code: str = "STRIPE_RATE_LIMITED"


class StripeAPIUnavailableError(StripeError):
    """Stripe could not be reached or returned a server error."""

    default_error_code: str = "STRIPE_UNAVAILABLE"


class StripeTimeoutError(StripeError):
    """The request to Stripe timed out."""

    default_error_code: str = "STRIPE_TIMEOUT"
