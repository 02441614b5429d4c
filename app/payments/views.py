"""
DRF views for the payments app.

Endpoints:
    POST /api/v1/payments/checkout/session/ - Create checkout session
    GET  /api/v1/payments/orders/status/    - Poll an order's paid flag
    POST /api/v1/payments/webhooks/stripe/  - Stripe webhook (see webhooks/views.py)

Related files:
    - services/checkout_service.py: CheckoutService
    - serializers.py: Request/response serializers

Security:
    - Checkout and polling require authentication
    - Webhook verifies Stripe signature
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.exceptions import (
    PaymentError,
    PaymentGatewayUnavailableError,
    PaymentNotFoundError,
    PaymentValidationError,
)
from payments.serializers import (
    CheckoutSessionResponseSerializer,
    CreateCheckoutSessionSerializer,
    OrderStatusQuerySerializer,
    OrderStatusResponseSerializer,
    PaymentErrorSerializer,
)
from payments.services import CheckoutService

logger = logging.getLogger(__name__)


def error_status(error: PaymentError) -> int:
    """HTTP status for a payment domain error."""
    if isinstance(error, PaymentValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, PaymentNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, PaymentGatewayUnavailableError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class CreateCheckoutSessionView(APIView):
    """
    Create an order and a payment session for it.

    POST /api/v1/payments/checkout/session/

    Request body:
        {"productIds": ["<uuid>", ...]}

    Returns:
        {"url": "https://checkout.stripe.com/..."} or the thank-you page
        when the order was approved without the gateway
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_checkout_session",
        summary="Create checkout session",
        tags=["Payments"],
        request=CreateCheckoutSessionSerializer,
        responses={
            200: CheckoutSessionResponseSerializer,
            400: OpenApiResponse(
                PaymentErrorSerializer,
                description="Empty cart or no known products",
            ),
            503: OpenApiResponse(
                PaymentErrorSerializer,
                description="Payment provider unavailable",
            ),
        },
    )
    def post(self, request):
        serializer = CreateCheckoutSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = CheckoutService.create_session(
                user=request.user,
                product_ids=serializer.validated_data["product_ids"],
            )
        except PaymentError as e:
            return Response(e.to_dict(), status=error_status(e))

        return Response(CheckoutSessionResponseSerializer({"url": result.url}).data)


class PollOrderStatusView(APIView):
    """
    Report whether an order has been paid.

    GET /api/v1/payments/orders/status/?orderId=<uuid>

    Returns:
        {"isPaid": true|false}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="poll_order_status",
        summary="Poll order payment status",
        tags=["Payments"],
        parameters=[
            OpenApiParameter("orderId", str, OpenApiParameter.QUERY, required=True),
        ],
        responses={
            200: OrderStatusResponseSerializer,
            404: OpenApiResponse(PaymentErrorSerializer, description="No such order"),
        },
    )
    def get(self, request):
        serializer = OrderStatusQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        try:
            is_paid = CheckoutService.poll_order_status(
                user=request.user,
                order_id=serializer.validated_data["order_id"],
            )
        except PaymentError as e:
            return Response(e.to_dict(), status=error_status(e))

        return Response(OrderStatusResponseSerializer({"is_paid": is_paid}).data)
