"""
Typed view of a verified Stripe webhook event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class MissingMetadataError(ValueError):
    """The event does not carry the checkout metadata (userId, orderId)."""


def _mapping(value: Any) -> dict[str, Any]:
    # Anything other than a JSON object reads as empty
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class CheckoutWebhookEvent:
    """
    A verified webhook event carrying checkout metadata.

    Attributes:
        event_id: Stripe event id (evt_xxx)
        event_type: Stripe event type (e.g. checkout.session.completed)
        user_id: Buyer id from the session metadata
        order_id: Order id from the session metadata
        payload: The full event dict
    """

    event_id: str
    event_type: str
    user_id: str
    order_id: str
    payload: dict[str, Any] = field(repr=False, default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CheckoutWebhookEvent:
        """
        Build from a verified event dict.

        Raises:
            MissingMetadataError: If data.object.metadata lacks userId or orderId
        """
        data_object = _mapping(_mapping(payload.get("data")).get("object"))
        metadata = _mapping(data_object.get("metadata"))
        user_id = metadata.get("userId")
        order_id = metadata.get("orderId")

        if not user_id or not order_id:
            raise MissingMetadataError("No user present in metadata")

        return cls(
            event_id=payload.get("id", ""),
            event_type=payload.get("type", ""),
            user_id=str(user_id),
            order_id=str(order_id),
            payload=payload,
        )
