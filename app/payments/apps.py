"""
Payments app configuration.

This app provides the checkout flow:
- Stripe Checkout Session creation and order status polling
- Webhook handling for completed checkouts
- Receipt emails
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
