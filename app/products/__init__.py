"""
Products application.

Minimal product reference used by orders and checkout line items.
Catalog management lives outside this service.
"""
