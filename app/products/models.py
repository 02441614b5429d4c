"""
Product reference model.

Related files:
    - orders/models.py: Orders reference products through OrderLine
    - payments/services/checkout_service.py: Builds gateway line items
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class ProductQuerySet(models.QuerySet):
    def in_order_of(self, product_ids):
        """
        Resolve product ids preserving the requested order.

        Unknown ids are dropped and duplicates collapse to their first
        occurrence.

        Returns:
            list[Product]
        """
        by_id = {str(product.pk): product for product in self.filter(pk__in=product_ids)}
        resolved = []
        seen = set()
        for product_id in product_ids:
            key = str(product_id)
            if key in by_id and key not in seen:
                seen.add(key)
                resolved.append(by_id[key])
        return resolved


class Product(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchasable product.

    Fields:
        id: UUID primary key
        name: Display name used in receipts
        price: Unit price in the store currency
        stripe_price_id: Gateway price id; blank when the product is not
            billable through the gateway
    """

    name = models.CharField(
        max_length=255,
        help_text="Display name shown to buyers and in receipts",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Unit price",
    )
    stripe_price_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Stripe Price ID (price_xxx); blank if not billable via Stripe",
    )

    objects = ProductQuerySet.as_manager()

    class Meta(BaseModel.Meta):
        verbose_name = "product"
        verbose_name_plural = "products"

    def __str__(self):
        return self.name

    @property
    def is_billable(self):
        """Whether the gateway knows a price for this product."""
        return bool(self.stripe_price_id)
