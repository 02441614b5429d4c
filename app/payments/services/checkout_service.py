"""
Checkout service: payment session creation and order status polling.

Flow:
    create_session(user, product_ids)
        → resolve products (unknown ids dropped, request order kept)
        → OrderService.create_order (unpaid, owned by the caller)
        → gateway disabled:  mark paid, redirect to the thank-you page
        → gateway enabled:   create a Stripe Checkout Session, redirect to it
        → gateway failure:   degrade (mark paid, thank-you page) or raise 503,
                             depending on PAYMENTS_DEGRADE_ON_GATEWAY_FAILURE

    poll_order_status(user, order_id)
        → paid flag of an order inside the caller's visibility scope

Usage:
    from payments.services import CheckoutService

    response = CheckoutService.create_session(request.user, product_ids)
    return Response({"url": response.url})
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError

from core.services import BaseService
from orders.models import Order
from orders.services import OrderService
from payments.adapters import (
    CreateCheckoutSessionParams,
    IdempotencyKeyGenerator,
    get_payment_gateway,
)
from payments.exceptions import (
    PaymentGatewayUnavailableError,
    PaymentNotFoundError,
    PaymentValidationError,
    StripeError,
)
from products.models import Product

if TYPE_CHECKING:
    from collections.abc import Sequence

    from authentication.models import User


@dataclass
class CheckoutSessionResponse:
    """
    Outcome of a checkout request.

    Attributes:
        url: Where the client should be redirected
        order_id: The order created for this checkout
        payment_skipped: True when the order was approved without the gateway
    """

    url: str
    order_id: uuid.UUID
    payment_skipped: bool = False


def thank_you_url(order_id: uuid.UUID | str) -> str:
    """Storefront page shown after a completed (or skipped) payment."""
    query = urlencode({"orderId": str(order_id)})
    return f"{settings.PUBLIC_SERVER_URL}/thank-you?{query}"


def cart_url() -> str:
    """Storefront page shown when the buyer cancels checkout."""
    return f"{settings.PUBLIC_SERVER_URL}/cart"


def build_line_items(products: Sequence[Product]) -> list[dict]:
    """
    Build Stripe line items for the given products.

    Products without a Stripe price are not billed. One platform fee line
    is always appended with a fixed quantity of 1.
    """
    line_items = [
        {"price": product.stripe_price_id, "quantity": 1}
        for product in products
        if product.is_billable
    ]
    line_items.append(
        {
            "price": settings.STRIPE_PLATFORM_FEE_PRICE_ID,
            "quantity": 1,
            "adjustable_quantity": {"enabled": False},
        }
    )
    return line_items


class CheckoutService(BaseService):
    """
    Service for starting checkouts and polling their outcome.

    Methods:
        create_session: Create an order and a redirect URL for payment
        poll_order_status: Read the paid flag of a visible order
    """

    @classmethod
    def create_session(
        cls,
        user: User,
        product_ids: Sequence[uuid.UUID | str],
    ) -> CheckoutSessionResponse:
        """
        Create an order for `user` and a URL to complete its payment.

        Args:
            user: Authenticated buyer
            product_ids: Requested product ids, in display order

        Returns:
            CheckoutSessionResponse with the redirect URL

        Raises:
            PaymentValidationError: Empty request or no known products
            PaymentGatewayUnavailableError: Gateway failed and degradation
                is disabled
        """
        logger = cls.get_logger()

        if not product_ids:
            raise PaymentValidationError(
                "No products were requested",
                error_code="EMPTY_CART",
            )

        products = Product.objects.in_order_of(product_ids)
        if not products:
            raise PaymentValidationError(
                "None of the requested products exist",
                error_code="NO_KNOWN_PRODUCTS",
                details={"requested": len(product_ids)},
            )

        order = OrderService.create_order(user=user, products=products)

        gateway = get_payment_gateway()
        if gateway is None:
            OrderService.mark_paid(order.id)
            logger.info(
                f"Payment gateway disabled; order {order.id} approved without payment",
                extra={"order_id": str(order.id), "user_id": user.pk},
            )
            return CheckoutSessionResponse(
                url=thank_you_url(order.id),
                order_id=order.id,
                payment_skipped=True,
            )

        params = CreateCheckoutSessionParams(
            line_items=build_line_items(products),
            success_url=thank_you_url(order.id),
            cancel_url=cart_url(),
            payment_method_types=list(settings.STRIPE_PAYMENT_METHOD_TYPES),
            mode="payment",
            metadata={"userId": str(user.pk), "orderId": str(order.id)},
            idempotency_key=IdempotencyKeyGenerator.generate(
                "checkout_session", order.id
            ),
        )

        try:
            session = gateway.create_checkout_session(params)
        except StripeError as e:
            return cls._handle_gateway_failure(order, e)

        logger.info(
            f"Checkout session {session.id} created for order {order.id}",
            extra={"order_id": str(order.id), "checkout_session_id": session.id},
        )
        return CheckoutSessionResponse(url=session.url, order_id=order.id)

    @classmethod
    def _handle_gateway_failure(
        cls, order: Order, error: StripeError
    ) -> CheckoutSessionResponse:
        logger = cls.get_logger()
        log_context = {
            "order_id": str(order.id),
            "error_code": error.error_code,
            "stripe_code": error.stripe_code,
        }

        if not settings.PAYMENTS_DEGRADE_ON_GATEWAY_FAILURE:
            logger.error(
                f"Checkout session failed for order {order.id}; order left unpaid",
                extra=log_context,
            )
            raise PaymentGatewayUnavailableError(
                "The payment provider is unavailable. Please try again later.",
                details={"order_id": str(order.id)},
            ) from error

        logger.warning(
            f"Checkout session failed for order {order.id}; "
            f"approving without payment",
            extra=log_context,
        )
        OrderService.mark_paid(order.id)
        return CheckoutSessionResponse(
            url=thank_you_url(order.id),
            order_id=order.id,
            payment_skipped=True,
        )

    @classmethod
    def poll_order_status(cls, user: User, order_id: uuid.UUID | str) -> bool:
        """
        Return whether an order visible to `user` is paid.

        Raises:
            PaymentNotFoundError: Order missing or outside the caller's scope
        """
        try:
            is_paid = (
                Order.objects.visible_to(user)
                .values_list("is_paid", flat=True)
                .get(pk=order_id)
            )
        except (Order.DoesNotExist, ValueError, DjangoValidationError):
            raise PaymentNotFoundError(
                "No such order exists.",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            ) from None
        return is_paid
