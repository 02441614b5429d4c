"""
Exceptions raised by toolkit services.
"""

from core.exceptions import ExternalServiceError


class EmailDeliveryError(ExternalServiceError):
    """Raised when the configured email backend fails to send a message."""

    default_error_code: str = "EMAIL_DELIVERY_FAILED"
