"""
Stripe API adapter for checkout operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls should go through this
adapter to ensure consistent error handling, timeouts, idempotency,
and observability.

Features:
- Configurable timeouts and SDK network retries on all API calls
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Idempotency keys derived from the order id

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key (empty disables the gateway)
- STRIPE_WEBHOOK_SECRET: Webhook signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- STRIPE_MAX_RETRIES: SDK network retries (default: 3)

Usage:
    from payments.adapters import CreateCheckoutSessionParams, get_payment_gateway

    gateway = get_payment_gateway()
    if gateway is not None:
        result = gateway.create_checkout_session(
            CreateCheckoutSessionParams(
                line_items=[{"price": "price_xxx", "quantity": 1}],
                success_url="https://shop.example/thank-you?orderId=...",
                cancel_url="https://shop.example/cart",
                metadata={"userId": "1", "orderId": "..."},
                idempotency_key=IdempotencyKeyGenerator.generate(
                    "checkout_session", order.id
                ),
            )
        )
        redirect_to = result.url
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings

from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeAuthenticationError,
    StripeInvalidRequestError,
    StripeRateLimitError,
    StripeTimeoutError,
    WebhookSignatureError,
)

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreateCheckoutSessionParams:
    """
    Parameters for creating a Stripe Checkout Session.

    Attributes:
        line_items: Stripe line items ({"price": ..., "quantity": ...})
        success_url: Redirect after successful payment
        cancel_url: Redirect when the buyer abandons checkout
        metadata: Key-value pairs echoed back in webhook events
        idempotency_key: Unique key for idempotent creation
        payment_method_types: Allowed payment methods
        mode: Checkout mode (default: 'payment')
    """

    line_items: list[dict[str, Any]]
    success_url: str
    cancel_url: str
    idempotency_key: str
    metadata: dict[str, str] = field(default_factory=dict)
    payment_method_types: list[str] = field(default_factory=lambda: ["card"])
    mode: str = "payment"

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.line_items:
            raise ValueError("line_items must not be empty")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")


@dataclass
class CheckoutSessionResult:
    """
    Result from Stripe Checkout Session creation.

    Attributes:
        id: Checkout Session ID (cs_xxx)
        url: Hosted checkout page the buyer is redirected to
    """

    id: str
    url: str


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe API calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation='checkout_session',
            entity_id=order.id,
        )
        # Result: "checkout_session:550e8400-e29b-41d4-a716-446655440000:1:a1b2c3d4"
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str,
        attempt: int = 1,
    ) -> str:
        """
        Generate a unique idempotency key.

        Args:
            operation: The Stripe operation (checkout_session, ...)
            entity_id: The domain entity ID (order id)
            attempt: Attempt number for retries (default: 1)

        Returns:
            Formatted idempotency key string
        """
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


# =============================================================================
# Gateway Factory
# =============================================================================


def get_payment_gateway() -> type[StripeAdapter] | None:
    """
    Return the payment gateway, or None when payments are disabled.

    The gateway is enabled exactly when STRIPE_SECRET_KEY is configured.
    """
    if not settings.STRIPE_SECRET_KEY:
        return None
    return StripeAdapter


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are class methods; no instance state is maintained.

    Usage:
        result = StripeAdapter.create_checkout_session(params)
        event = StripeAdapter.verify_webhook_signature(request.body, signature)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _configure_stripe() -> None:
        """Configure Stripe client with API key, timeout and retries."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        stripe.max_network_retries = getattr(settings, "STRIPE_MAX_RETRIES", 3)
        timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Checkout Sessions
    # =========================================================================

    @classmethod
    def create_checkout_session(
        cls,
        params: CreateCheckoutSessionParams,
    ) -> CheckoutSessionResult:
        """
        Create a hosted Stripe Checkout Session.

        Args:
            params: Parameters for the session

        Returns:
            CheckoutSessionResult carrying the redirect URL

        Raises:
            StripeInvalidRequestError: Invalid parameters (e.g. unknown price)
            StripeAuthenticationError: Secret key rejected
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: Stripe service unavailable
            StripeTimeoutError: Request timed out
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_checkout_session",
            "line_item_count": len(params.line_items),
            "idempotency_key": params.idempotency_key,
            "order_id": params.metadata.get("orderId"),
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            session = stripe.checkout.Session.create(
                line_items=params.line_items,
                success_url=params.success_url,
                cancel_url=params.cancel_url,
                payment_method_types=params.payment_method_types,
                mode=params.mode,
                metadata=params.metadata,
                idempotency_key=params.idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "checkout_session_id": session.id,
                    "duration_ms": duration_ms,
                },
            )

            return CheckoutSessionResult(
                id=session.id,
                url=session.url,
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise  # Never reached, but satisfies type checker

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_webhook_signature(
        cls,
        payload: bytes,
        signature: str,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw webhook payload bytes
            signature: Stripe-Signature header value

        Returns:
            Parsed event data dict

        Raises:
            WebhookSignatureError: Missing or invalid signature, or a body
                that is not a JSON object
        """
        try:
            text = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                text,
                signature,
                settings.STRIPE_WEBHOOK_SECRET,
                stripe.Webhook.DEFAULT_TOLERANCE,
            )
            event = json.loads(text)
        except stripe.SignatureVerificationError as e:
            cls.get_logger().warning(
                "Webhook signature verification failed",
                extra={"operation": "verify_webhook_signature"},
            )
            raise WebhookSignatureError(
                e.user_message or str(e),
                stripe_code="signature_verification_failed",
            ) from e
        except ValueError as e:
            raise WebhookSignatureError(
                f"Invalid payload: {e}",
                stripe_code="invalid_payload",
            ) from e

        if not isinstance(event, dict):
            raise WebhookSignatureError(
                "Invalid payload: expected a JSON object",
                stripe_code="invalid_payload",
            )
        return event

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Args:
            error: The Stripe exception
            log_context: Logging context dict
            duration_ms: Operation duration for logging

        Raises:
            StripeInvalidRequestError: Invalid request parameters
            StripeAuthenticationError: Invalid API key
            StripeRateLimitError: Rate limited
            StripeTimeoutError: Request timed out
            StripeAPIUnavailableError: API unavailable or unexpected error
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            ) from error

        elif isinstance(error, stripe.RateLimitError):
            logger.warning(
                "Rate limited by Stripe",
                extra=log_context,
            )
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            ) from error

        elif isinstance(error, stripe.APIConnectionError):
            if "timed out" in str(error).lower():
                logger.error(
                    "Request to Stripe timed out",
                    extra=log_context,
                )
                raise StripeTimeoutError(
                    "Request to Stripe timed out. Please retry.",
                    stripe_code="timeout",
                ) from error

            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            ) from error

        elif isinstance(error, stripe.APIError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code="api_error",
            ) from error

        elif isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeAuthenticationError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            ) from error

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                f"Unexpected Stripe error: {error}",
                stripe_code="unknown_error",
            ) from error
