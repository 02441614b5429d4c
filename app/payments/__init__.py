"""
Payments app for Stripe checkout.

This app handles:
- Checkout session creation (with a no-gateway fallback)
- Order payment status polling
- Stripe webhook verification and dispatch
- Receipt emails for paid orders

Related apps:
    - orders: Order store updated by checkout and webhooks
    - toolkit: EmailService used for receipts

Usage:
    from payments.services import CheckoutService

    response = CheckoutService.create_session(user, product_ids)
"""
