"""Payment gateway port.

The marketplace is a client of a hosted-checkout provider. It owns two
contracts: the shape of the session request, with line items tagged by
vendor and a shipping/tax breakdown, and the webhook events it accepts back.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class PaymentGatewayError(Exception):
    """The processor refused or failed a request; the message is the processor's."""


class InvalidWebhookSignature(Exception):
    pass


@dataclass(frozen=True)
class SessionLineItem:
    name: str
    unit_amount: float
    quantity: int
    kind: str = "product"  # product, shipping or tax
    vendor_id: str | None = None
    product_id: str | None = None


@dataclass(frozen=True)
class CheckoutSessionRequest:
    checkout_id: str
    customer_email: str
    currency: str
    line_items: list[SessionLineItem]
    discount_amount: float = 0.0
    metadata: dict[str, str] = field(default_factory=dict)
    success_url: str = ""
    cancel_url: str = ""

    @property
    def amount_total(self) -> float:
        gross = sum(item.unit_amount * item.quantity for item in self.line_items)
        return round(gross - self.discount_amount, 2)


@dataclass(frozen=True)
class CheckoutSessionResult:
    session_id: str
    url: str


@dataclass(frozen=True)
class WebhookEvent:
    type: str
    object_id: str | None = None
    checkout_id: str | None = None
    payment_reference: str | None = None
    failure_reason: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "WebhookEvent":
        """Read the fields the marketplace needs from a processor event body."""
        obj = (payload.get("data") or {}).get("object") or {}
        metadata = obj.get("metadata") or {}
        failure = (obj.get("last_payment_error") or {}).get("message")
        payment_reference = obj.get("payment_intent") or (obj.get("id") if obj.get("object") == "payment_intent" else None)
        return cls(
            type=payload.get("type", ""),
            object_id=obj.get("id"),
            checkout_id=metadata.get("checkout_id"),
            payment_reference=payment_reference,
            failure_reason=failure,
        )


def decode_payload(payload: str | bytes) -> dict:
    try:
        body = json.loads(payload)
    except (TypeError, ValueError):
        raise InvalidWebhookSignature("Webhook payload is not valid JSON") from None
    if not isinstance(body, dict):
        raise InvalidWebhookSignature("Webhook payload must be a JSON object")
    return body


class PaymentGateway(ABC):
    signature_header: str = "X-Gateway-Signature"

    @abstractmethod
    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSessionResult:
        """Open a hosted checkout; raises PaymentGatewayError on failure."""
        ...

    @abstractmethod
    def parse_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        """Authenticate and decode a webhook; raises InvalidWebhookSignature."""
        ...
