"""
Payment adapters for external services.

All external payment API calls should go through these adapters to ensure
consistent error handling, timeouts, idempotency, and observability.

Usage:
    from payments.adapters import get_payment_gateway

    gateway = get_payment_gateway()  # None when Stripe is not configured
"""

from payments.adapters.stripe_adapter import (
    CheckoutSessionResult,
    CreateCheckoutSessionParams,
    IdempotencyKeyGenerator,
    StripeAdapter,
    get_payment_gateway,
)

__all__ = [
    "CheckoutSessionResult",
    "CreateCheckoutSessionParams",
    "IdempotencyKeyGenerator",
    "StripeAdapter",
    "get_payment_gateway",
]
