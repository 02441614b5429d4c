"""
Payment services for coordinating checkout operations.

This module provides:
- CheckoutService: Checkout session creation and order status polling

Usage:
    from payments.services import CheckoutService

    response = CheckoutService.create_session(user, product_ids)
    is_paid = CheckoutService.poll_order_status(user, order_id)
"""

from payments.services.checkout_service import (
    CheckoutService,
    CheckoutSessionResponse,
    build_line_items,
    thank_you_url,
)

__all__ = [
    "CheckoutService",
    "CheckoutSessionResponse",
    "build_line_items",
    "thank_you_url",
]
