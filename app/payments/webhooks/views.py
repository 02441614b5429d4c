"""
Webhook endpoint views for Stripe.

The view:
1. Acknowledges without action when the gateway is disabled
2. Verifies the webhook signature
3. Extracts the checkout metadata (userId, orderId)
4. Dispatches the event to its registered handler synchronously
5. Maps the handler result to an HTTP response

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import get_payment_gateway
from payments.exceptions import WebhookSignatureError
from payments.webhooks.events import CheckoutWebhookEvent, MissingMetadataError
from payments.webhooks.handlers import (
    ORDER_NOT_FOUND,
    USER_NOT_FOUND,
    dispatch_webhook,
)

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {USER_NOT_FOUND, ORDER_NOT_FOUND}


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive and process Stripe webhook events.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - Marking an order paid is an unconditional overwrite, so Stripe's
      retries converge on the same state (receipts may be re-sent)

    Returns:
        HttpResponse with status:
        - 200: Event handled, ignored, or payments disabled
        - 400: Invalid signature or missing metadata
        - 404: Unknown user or order
        - 500: Receipt could not be sent (order stays paid)

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    gateway = get_payment_gateway()
    if gateway is None:
        logger.info("Webhook received while Stripe is not enabled")
        return HttpResponse("Stripe is not enabled", status=200)

    payload = request.body
    signature = request.headers.get("Stripe-Signature", "")

    # Step 1: Verify signature
    try:
        event_data = gateway.verify_webhook_signature(payload, signature)
    except WebhookSignatureError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"error": e.message},
        )
        return HttpResponse(f"Webhook Error: {e.message}", status=400)

    # Step 2: Require checkout metadata
    try:
        event = CheckoutWebhookEvent.from_payload(event_data)
    except MissingMetadataError as e:
        logger.warning(
            "Webhook missing checkout metadata",
            extra={"stripe_event_id": event_data.get("id")},
        )
        return HttpResponse(f"Webhook Error: {e}", status=400)

    logger.info(
        f"Received Stripe webhook: {event.event_type}",
        extra={
            "stripe_event_id": event.event_id,
            "event_type": event.event_type,
            "order_id": event.order_id,
        },
    )

    # Step 3: Dispatch
    result = dispatch_webhook(event)

    if result.success:
        if result.data is None:
            return HttpResponse(status=200)
        return JsonResponse({"data": result.data}, status=200)

    status = 404 if result.error_code in NOT_FOUND_CODES else 500
    return JsonResponse({"error": result.error}, status=status)
