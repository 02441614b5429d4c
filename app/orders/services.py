"""
Order service layer.

Owns every write to the order store so that the server-assigned fields
(`user`, `is_paid`) are never taken from client input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.utils import timezone

from core.exceptions import ValidationError
from core.services import BaseService
from orders.models import Order, OrderLine

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from authentication.models import User
    from products.models import Product


def _unique_in_order(products: Iterable[Product]) -> list[Product]:
    seen = set()
    unique = []
    for product in products:
        if product.pk not in seen:
            seen.add(product.pk)
            unique.append(product)
    return unique


class OrderService(BaseService):
    """
    Service for creating orders and recording payment.

    Methods:
        create_order: Create an unpaid order owned by a user
        replace_products: Rewrite an order's product lines
        mark_paid: Set the paid flag (idempotent)
    """

    @classmethod
    def create_order(cls, user: User, products: Iterable[Product]) -> Order:
        """
        Create an unpaid order for `user` containing `products`.

        Duplicate products collapse to their first occurrence.

        Raises:
            ValidationError: If no products were given
        """
        products = _unique_in_order(products)
        if not products:
            raise ValidationError(
                message="An order must contain at least one product",
                error_code="EMPTY_ORDER",
            )

        with cls.atomic():
            order = Order.objects.create(user=user, is_paid=False)
            cls._write_lines(order, products)

        cls.get_logger().info(
            f"Created order {order.id}",
            extra={
                "order_id": str(order.id),
                "user_id": user.pk,
                "product_count": len(products),
            },
        )
        return order

    @classmethod
    def replace_products(cls, order: Order, products: Iterable[Product]) -> Order:
        """Replace the product lines of an existing order."""
        products = _unique_in_order(products)
        if not products:
            raise ValidationError(
                message="An order must contain at least one product",
                error_code="EMPTY_ORDER",
            )

        with cls.atomic():
            order.lines.all().delete()
            cls._write_lines(order, products)
        return order

    @classmethod
    def mark_paid(cls, order_id: uuid.UUID | str) -> bool:
        """
        Set `is_paid = True` on an order.

        The write is unconditional, so repeated calls leave the order in the
        same state.

        Returns:
            True if the order exists, False otherwise
        """
        updated = Order.objects.filter(pk=order_id).update(
            is_paid=True,
            updated_at=timezone.now(),
        )
        if updated:
            cls.get_logger().info(
                f"Order {order_id} marked paid",
                extra={"order_id": str(order_id)},
            )
        return bool(updated)

    @staticmethod
    def _write_lines(order: Order, products: list[Product]) -> None:
        OrderLine.objects.bulk_create(
            [
                OrderLine(order=order, product=product, position=position)
                for position, product in enumerate(products)
            ]
        )
