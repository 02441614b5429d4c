"""
Tests for ReceiptMailer.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from freezegun import freeze_time

from orders.tests.factories import OrderFactory
from payments.exceptions import ReceiptDeliveryError
from payments.receipts import RECEIPT_SUBJECT, ReceiptMailer
from products.tests.factories import ProductFactory
from toolkit.exceptions import EmailDeliveryError


@pytest.fixture
def order(customer):
    products = [
        ProductFactory(name="Sticker sheet", price=Decimal("4.50")),
        ProductFactory(name="Poster", price=Decimal("20.00")),
    ]
    return OrderFactory(user=customer, products=products, is_paid=True)


@pytest.mark.django_db
class TestBuildContext:
    """Tests for the receipt template context."""

    @freeze_time("2026-03-14 12:00:00")
    def test_context(self, settings, customer, order):
        settings.RECEIPT_TRANSACTION_FEE = Decimal("1.00")

        context = ReceiptMailer.build_context(customer, order)

        assert context["date"].isoformat().startswith("2026-03-14T12:00:00")
        assert context["email"] == customer.email
        assert context["order_id"] == str(order.id)
        assert context["products"] == [
            {"name": "Sticker sheet", "price": Decimal("4.50")},
            {"name": "Poster", "price": Decimal("20.00")},
        ]
        assert context["subtotal"] == Decimal("24.50")
        assert context["transaction_fee"] == Decimal("1.00")
        assert context["total"] == Decimal("25.50")


@pytest.mark.django_db
class TestSendReceipt:
    """Tests for sending the receipt email."""

    @freeze_time("2026-03-14 12:00:00")
    def test_sends_html_and_text(self, settings, customer, order, mailoutbox):
        settings.RECEIPT_FROM_EMAIL = "receipts@shop.example"

        message_id = ReceiptMailer.send_receipt(customer, order)

        assert len(mailoutbox) == 1
        message = mailoutbox[0]
        assert message.subject == RECEIPT_SUBJECT
        assert message.from_email == "receipts@shop.example"
        assert message.to == [customer.email]
        assert message.extra_headers["Message-ID"] == message_id
        assert "Sticker sheet" in message.body
        assert "Total: $25.50" in message.body
        assert "14 Mar 2026" in message.body

        html, mimetype = message.alternatives[0]
        assert mimetype == "text/html"
        assert "Poster" in html
        assert str(order.id) in html

    def test_delivery_failure_raises(self, customer, order):
        with patch(
            "payments.receipts.EmailService.send",
            side_effect=EmailDeliveryError("Connection refused"),
        ):
            with pytest.raises(ReceiptDeliveryError) as exc_info:
                ReceiptMailer.send_receipt(customer, order)

        assert exc_info.value.message == "Connection refused"
        assert exc_info.value.details == {"order_id": str(order.id)}

    def test_unexpected_backend_error_raises(self, customer, order, caplog):
        """Should wrap errors from non-SMTP backends as delivery failures."""

        class ProviderError(Exception):
            pass

        with patch(
            "toolkit.services.email.EmailMultiAlternatives.send",
            side_effect=ProviderError("provider 502"),
        ):
            with pytest.raises(ReceiptDeliveryError) as exc_info:
                ReceiptMailer.send_receipt(customer, order)

        assert "provider 502" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__.__cause__, ProviderError)
        assert "Failed to send email" in caplog.text

    def test_template_error_raises(self, customer, order):
        with patch(
            "payments.receipts.EmailService.send",
            side_effect=RuntimeError("template blew up"),
        ):
            with pytest.raises(ReceiptDeliveryError) as exc_info:
                ReceiptMailer.send_receipt(customer, order)

        assert exc_info.value.message == "template blew up"
