"""
DRF serializers for the payments app.

Request and response bodies use the storefront's camelCase keys
(productIds, orderId, isPaid) mapped onto snake_case attributes.

Related files:
    - views.py: Checkout API views
"""

from __future__ import annotations

from rest_framework import serializers


class CreateCheckoutSessionSerializer(serializers.Serializer):
    """
    Request body for POST /api/v1/payments/checkout/session/.

    An empty list is accepted here and rejected by the checkout service
    with a domain error code.
    """

    productIds = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=True,
        source="product_ids",
        help_text="Products to buy, in display order",
    )


class CheckoutSessionResponseSerializer(serializers.Serializer):
    url = serializers.URLField(help_text="Where to redirect the buyer")


class OrderStatusQuerySerializer(serializers.Serializer):
    """Query parameters for GET /api/v1/payments/orders/status/."""

    orderId = serializers.UUIDField(source="order_id")


class OrderStatusResponseSerializer(serializers.Serializer):
    isPaid = serializers.BooleanField(source="is_paid")


class PaymentErrorSerializer(serializers.Serializer):
    """Error body produced by BaseApplicationError.to_dict()."""

    error = serializers.CharField()
    error_code = serializers.CharField()
    details = serializers.DictField(required=False)
