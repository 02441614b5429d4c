"""
Email service for centralized email sending.

This module provides the EmailService class for sending emails with:
- Django template rendering for HTML and plain text
- A stable Message-ID returned to the caller

Configuration:
    Email settings are read from Django settings:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT, EMAIL_HOST_USER, EMAIL_HOST_PASSWORD
    - EMAIL_TIMEOUT
    - DEFAULT_FROM_EMAIL

Usage:
    from toolkit.services.email import EmailService

    message_id = EmailService.send(
        to="user@example.com",
        subject="Thanks for your order!",
        template_name="payments/receipt_email",
        context={"order_id": order.id},
    )
"""

from __future__ import annotations

import logging
from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from toolkit.exceptions import EmailDeliveryError
from toolkit.helpers import mask_email

logger = logging.getLogger(__name__)


def _normalize_recipients(to: str | list[str]) -> list[str]:
    return [to] if isinstance(to, str) else list(to)


class EmailService:
    """
    Centralized email sending with template support.

    Both send methods return the Message-ID header of the sent message and
    raise EmailDeliveryError when the backend fails.

    Usage:
        # Send template email
        message_id = EmailService.send(
            to="user@example.com",
            subject="Welcome!",
            template_name="welcome",
            context={"user_name": "John"}
        )

        # Send raw email
        message_id = EmailService.send_raw(
            to="user@example.com",
            subject="Quick note",
            body_text="Plain text content",
            body_html="<p>HTML content</p>"
        )
    """

    @staticmethod
    def send(
        to: str | list[str],
        subject: str,
        template_name: str,
        context: dict,
        from_email: str | None = None,
    ) -> str:
        """
        Send email using a template.

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            template_name: Name of template (without extension)
                           Looks for: {template_name}.html and {template_name}.txt
            context: Template context variables
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)

        Returns:
            The Message-ID of the sent email

        Raises:
            EmailDeliveryError: If the email backend rejects the message
        """
        html_content = render_to_string(f"{template_name}.html", context)

        try:
            text_content = render_to_string(f"{template_name}.txt", context)
        except TemplateDoesNotExist:
            text_content = strip_tags(html_content)

        return EmailService.send_raw(
            to=to,
            subject=subject,
            body_text=text_content,
            body_html=html_content,
            from_email=from_email,
        )

    @staticmethod
    def send_raw(
        to: str | list[str],
        subject: str,
        body_text: str,
        body_html: str | None = None,
        from_email: str | None = None,
    ) -> str:
        """
        Send email with raw content (no template).

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            body_text: Plain text email body
            body_html: HTML email body (optional)
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)

        Returns:
            The Message-ID of the sent email

        Raises:
            EmailDeliveryError: If the email backend rejects the message
        """
        recipients = _normalize_recipients(to)
        from_email = from_email or settings.DEFAULT_FROM_EMAIL
        message_id = make_msgid(domain=from_email.rsplit("@", 1)[-1])

        email = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=from_email,
            to=recipients,
            headers={"Message-ID": message_id},
        )

        if body_html:
            email.attach_alternative(body_html, "text/html")

        masked = ", ".join(mask_email(address) for address in recipients)
        try:
            email.send(fail_silently=False)
        except Exception as e:
            # API-based backends raise their own exception types
            logger.error(
                f"Failed to send email to {masked}: {e}",
                extra={"subject": subject},
                exc_info=True,
            )
            raise EmailDeliveryError(
                f"Failed to send email: {e}",
                details={"subject": subject},
            ) from e

        logger.info(
            f"Email sent to {masked}: {subject}",
            extra={"message_id": message_id},
        )
        return message_id
