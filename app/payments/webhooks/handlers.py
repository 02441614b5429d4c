"""
Webhook event handlers for Stripe events.

This module provides a handler registry and the handler for completed
checkout sessions.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    # Register a custom handler
    @register_handler("custom.event")
    def handle_custom_event(event: CheckoutWebhookEvent) -> ServiceResult:
        ...

    # Dispatch an event to its handler
    result = dispatch_webhook(event)
"""

from __future__ import annotations

import logging
from typing import Callable

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Prefetch

from authentication.models import User
from core.services import ServiceResult
from orders.models import Order, OrderLine
from orders.services import OrderService
from payments.exceptions import ReceiptDeliveryError
from payments.receipts import ReceiptMailer
from payments.webhooks.events import CheckoutWebhookEvent

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "USER_NOT_FOUND"
ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
RECEIPT_DELIVERY_FAILED = ReceiptDeliveryError.default_error_code


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[CheckoutWebhookEvent], ServiceResult]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Usage:
        @register_handler("checkout.session.completed")
        def handle_checkout_completed(event: CheckoutWebhookEvent) -> ServiceResult:
            ...

    Args:
        event_type: The Stripe event type

    Returns:
        Decorator function that registers the handler
    """

    def decorator(
        func: Callable[[CheckoutWebhookEvent], ServiceResult],
    ) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(event: CheckoutWebhookEvent) -> ServiceResult:
    """
    Dispatch a webhook event to the appropriate handler.

    If no handler is registered, logs and returns success with no data
    (to avoid failing on unknown events).

    Returns:
        ServiceResult from the handler, or ok(None) if no handler
    """
    handler = WEBHOOK_HANDLERS.get(event.event_type)

    if not handler:
        logger.info(
            f"No handler registered for event type: {event.event_type}",
            extra={"stripe_event_id": event.event_id},
        )
        return ServiceResult.ok(None)

    logger.info(
        f"Dispatching {event.event_type} to handler",
        extra={"stripe_event_id": event.event_id},
    )

    return handler(event)


# =============================================================================
# Checkout Handlers
# =============================================================================


def _find_user(user_id: str) -> User | None:
    try:
        user = User.objects.get(pk=int(user_id))
    except (User.DoesNotExist, ValueError):
        return None
    return user if user.email else None


def _find_order(order_id: str) -> Order | None:
    try:
        return Order.objects.prefetch_related(
            Prefetch("lines", queryset=OrderLine.objects.select_related("product"))
        ).get(pk=order_id)
    except (Order.DoesNotExist, ValueError, DjangoValidationError):
        return None


@register_handler("checkout.session.completed")
def handle_checkout_session_completed(event: CheckoutWebhookEvent) -> ServiceResult:
    """
    Mark the order paid and email the receipt.

    The paid flag is committed before the receipt is sent, so a failed
    email leaves the order paid.

    Returns:
        ServiceResult with {"id": message_id} on success, or a failure with
        USER_NOT_FOUND, ORDER_NOT_FOUND or RECEIPT_DELIVERY_FAILED
    """
    log_context = {
        "stripe_event_id": event.event_id,
        "order_id": event.order_id,
        "user_id": event.user_id,
    }

    user = _find_user(event.user_id)
    if user is None:
        logger.warning("checkout.session.completed: unknown user", extra=log_context)
        return ServiceResult.failure("No such user exists.", USER_NOT_FOUND)

    order = _find_order(event.order_id)
    if order is None:
        logger.warning("checkout.session.completed: unknown order", extra=log_context)
        return ServiceResult.failure("No such order exists.", ORDER_NOT_FOUND)

    if order.user_id != user.pk:
        logger.warning(
            "checkout.session.completed: order belongs to a different user",
            extra={**log_context, "order_user_id": order.user_id},
        )

    OrderService.mark_paid(order.id)
    order.is_paid = True

    try:
        message_id = ReceiptMailer.send_receipt(user, order)
    except ReceiptDeliveryError as e:
        return ServiceResult.failure(e.message, RECEIPT_DELIVERY_FAILED)

    return ServiceResult.ok({"id": message_id})
