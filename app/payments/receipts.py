"""
Receipt emails for paid orders.

Usage:
    from payments.receipts import ReceiptMailer

    message_id = ReceiptMailer.send_receipt(user, order)
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from payments.exceptions import ReceiptDeliveryError
from toolkit.exceptions import EmailDeliveryError
from toolkit.services.email import EmailService

if TYPE_CHECKING:
    from authentication.models import User
    from orders.models import Order

logger = logging.getLogger(__name__)

RECEIPT_SUBJECT = "Thanks for your order! This is your receipt."
RECEIPT_TEMPLATE = "payments/receipt_email"


class ReceiptMailer:
    """Render and send the receipt for a paid order."""

    @staticmethod
    def build_context(user: User, order: Order) -> dict:
        """Template context: date, buyer email, order, products and totals."""
        products = order.ordered_products()
        transaction_fee = Decimal(settings.RECEIPT_TRANSACTION_FEE)
        subtotal = sum((product.price for product in products), Decimal("0"))
        return {
            "date": timezone.now(),
            "email": user.email,
            "order_id": str(order.id),
            "products": [
                {"name": product.name, "price": product.price} for product in products
            ],
            "subtotal": subtotal,
            "transaction_fee": transaction_fee,
            "total": subtotal + transaction_fee,
        }

    @classmethod
    def send_receipt(cls, user: User, order: Order) -> str:
        """
        Email the receipt for `order` to `user`.

        Returns:
            The Message-ID of the sent email

        Raises:
            ReceiptDeliveryError: If the email could not be sent
        """
        try:
            message_id = EmailService.send(
                to=user.email,
                subject=RECEIPT_SUBJECT,
                template_name=RECEIPT_TEMPLATE,
                context=cls.build_context(user, order),
                from_email=settings.RECEIPT_FROM_EMAIL,
            )
        except Exception as e:
            logger.error(
                f"Receipt for order {order.id} could not be sent",
                extra={"order_id": str(order.id), "user_id": user.pk},
                exc_info=not isinstance(e, EmailDeliveryError),
            )
            message = e.message if isinstance(e, EmailDeliveryError) else str(e)
            raise ReceiptDeliveryError(
                message or "Failed to send receipt",
                details={"order_id": str(order.id)},
            ) from e

        logger.info(
            f"Receipt sent for order {order.id}",
            extra={"order_id": str(order.id), "message_id": message_id},
        )
        return message_id
