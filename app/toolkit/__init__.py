"""
Toolkit - Shared domain services.

Key components:
    - services/email.py: EmailService (templated and raw email)
    - helpers.py: mask_email for PII-safe logging
    - exceptions.py: EmailDeliveryError

Usage:
    from toolkit.services.email import EmailService
    from toolkit.helpers import mask_email

Note:
    This app has no models.
"""
