"""
ViewSet for the orders API.

URL Structure:
    /api/v1/orders/        GET, POST
    /api/v1/orders/{id}/   GET, PUT, PATCH, DELETE

Access rules:
    - list/retrieve: admins see all orders, others only their own
    - create: any authenticated user; owner and paid flag set by the server
    - update/partial_update/destroy: admins only
"""

from __future__ import annotations

from django.db.models import Prefetch
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from orders.models import Order, OrderLine
from orders.permissions import IsAdminRole
from orders.serializers import OrderSerializer


@extend_schema_view(
    list=extend_schema(
        operation_id="list_orders",
        summary="List orders",
        tags=["Orders"],
    ),
    create=extend_schema(
        operation_id="create_order",
        summary="Create order",
        tags=["Orders"],
    ),
    retrieve=extend_schema(
        operation_id="get_order",
        summary="Get order",
        tags=["Orders"],
    ),
    update=extend_schema(
        operation_id="replace_order",
        summary="Replace order (admin)",
        tags=["Orders"],
    ),
    partial_update=extend_schema(
        operation_id="update_order",
        summary="Update order (admin)",
        tags=["Orders"],
    ),
    destroy=extend_schema(
        operation_id="delete_order",
        summary="Delete order (admin)",
        tags=["Orders"],
    ),
)
class OrderViewSet(viewsets.ModelViewSet):
    """
    ViewSet for order operations.

    list:
        Orders visible to the caller, newest first.

    create:
        Create an unpaid order for the caller from a list of product ids.

    retrieve:
        Get one visible order. Orders outside the caller's scope are 404.

    update / partial_update / destroy:
        Administrator-only maintenance.
    """

    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        """Filter to orders the current user may see."""
        return (
            Order.objects.visible_to(self.request.user)
            .select_related("user")
            .prefetch_related(
                Prefetch("lines", queryset=OrderLine.objects.select_related("product"))
            )
        )

    def get_permissions(self):
        """Return permissions based on action."""
        if self.action in ("update", "partial_update", "destroy"):
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]
