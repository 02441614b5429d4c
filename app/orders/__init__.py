"""
Orders application.

The order store: orders, their ordered product lines, and the access
rules of the /api/v1/orders/ resource.

Key components:
    - Order / OrderLine models
    - OrderQuerySet.visible_to(): admin-or-owner visibility scope
    - OrderService: creation and the idempotent "mark paid" transition
    - OrderViewSet: REST resource with role-based field and action rules
"""
