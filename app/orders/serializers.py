"""
Serializers for the orders API.

Field rules:
    - `user` is always read-only and taken from the request
    - `is_paid` is shown only to admins and never written through the API;
      checkout and the payment webhook are the only writers
    - `products` is written as a list of product ids and read back in
      the order the lines were stored
"""

from __future__ import annotations

from rest_framework import serializers

from core.exceptions import ValidationError as DomainValidationError
from orders.models import Order
from orders.services import OrderService
from products.models import Product


class OrderSerializer(serializers.ModelSerializer):
    user = serializers.PrimaryKeyRelatedField(read_only=True)
    products = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=Product.objects.all(),
        allow_empty=False,
    )
    is_paid = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = ["id", "user", "products", "is_paid", "created_at", "updated_at"]
        read_only_fields = ["id", "user", "created_at", "updated_at"]

    def _requester_is_admin(self) -> bool:
        request = self.context.get("request")
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and user.is_admin)

    def get_fields(self):
        fields = super().get_fields()
        if not self._requester_is_admin():
            fields.pop("is_paid")
        return fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["products"] = [str(product.pk) for product in instance.ordered_products()]
        return data

    def create(self, validated_data):
        try:
            return OrderService.create_order(
                user=self.context["request"].user,
                products=validated_data["products"],
            )
        except DomainValidationError as e:
            raise serializers.ValidationError({"products": [e.message]}) from e

    def update(self, instance, validated_data):
        products = validated_data.pop("products", None)
        if products is not None:
            try:
                OrderService.replace_products(instance, products)
            except DomainValidationError as e:
                raise serializers.ValidationError({"products": [e.message]}) from e
        return instance
