"""
URL configuration for the payments app.

Routes:
    - POST /checkout/session/ - Create checkout session
    - GET  /orders/status/    - Poll order paid flag
    - POST /webhooks/stripe/  - Stripe webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.views import CreateCheckoutSessionView, PollOrderStatusView
from payments.webhooks.views import stripe_webhook

app_name = "payments"

urlpatterns = [
    path(
        "checkout/session/",
        CreateCheckoutSessionView.as_view(),
        name="checkout_session",
    ),
    path("orders/status/", PollOrderStatusView.as_view(), name="order_status"),
    # Webhook endpoints
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
]
