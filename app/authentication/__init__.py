"""
Authentication application.

Email-based accounts with a customer/admin role. Token issuance is handled
by djangorestframework-simplejwt (see config/urls.py).

Key components:
    - User model: Custom email-based user with a role
    - create_admin / promote_admin: Admin bootstrap management commands

Usage:
    from authentication.models import User, UserRole
"""
