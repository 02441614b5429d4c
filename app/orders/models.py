"""
Order models.

This module defines:
- Order: A user's purchase of one or more products
- OrderLine: Position of a product within an order

Lifecycle:
    Orders are created unpaid and flip to paid exactly once, either
    synchronously at checkout (gateway disabled or degraded) or from the
    payment webhook. Setting the flag is an unconditional overwrite, so
    replays converge on the same state.

Related files:
    - services.py: OrderService (create, mark paid)
    - serializers.py: Role-aware field rules for the REST resource
"""

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class OrderQuerySet(models.QuerySet):
    def visible_to(self, user):
        """
        Restrict to the orders a user may read.

        Admins see every order, other authenticated users only their own,
        anonymous users nothing.
        """
        if user is None or not user.is_authenticated:
            return self.none()
        if getattr(user, "is_admin", False):
            return self
        return self.filter(user=user)

    def paid(self):
        return self.filter(is_paid=True)

    def unpaid(self):
        return self.filter(is_paid=False)


class Order(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchase made by a user.

    Fields:
        id: UUID primary key (sent to the gateway as metadata)
        user: Buyer; assigned by the server, never by the client
        products: Purchased products, ordered through OrderLine.position
        is_paid: Payment flag, managed by the system

    Usage:
        order = OrderService.create_order(user, [product_a, product_b])
        order.ordered_products()  # [product_a, product_b]
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
        help_text="User who placed the order",
    )
    products = models.ManyToManyField(
        "products.Product",
        through="orders.OrderLine",
        related_name="orders",
        help_text="Products in this order",
    )
    is_paid = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether payment for this order has been confirmed",
    )

    objects = OrderQuerySet.as_manager()

    class Meta(BaseModel.Meta):
        verbose_name = "order"
        verbose_name_plural = "orders"
        indexes = [
            models.Index(fields=["user", "-created_at"], name="order_user_created_idx"),
        ]

    def __str__(self):
        return f"Order {self.pk}"

    def ordered_products(self):
        """Return the order's products in the sequence they were added."""
        return [line.product for line in self.lines.all()]


class OrderLine(models.Model):
    """
    A product's slot within an order.

    Fields:
        order: Owning order
        product: Purchased product
        position: Zero-based index preserving the requested sequence
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_lines",
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "product"],
                name="unique_order_product",
            ),
        ]

    def __str__(self):
        return f"{self.order_id}[{self.position}] {self.product_id}"
