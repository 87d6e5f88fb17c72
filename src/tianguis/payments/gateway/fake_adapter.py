"""Configurable fake checkout provider for development and tests.

Sessions point at ``https://checkout.fake``; webhooks are accepted when the
signature header is ``test-signature``. Payment can be switched to fail at
runtime through ``/payments/gateway/configure`` outside production.
"""

from uuid import uuid4

from tianguis.payments.gateway.port import (
    CheckoutSessionRequest,
    CheckoutSessionResult,
    InvalidWebhookSignature,
    PaymentGateway,
    PaymentGatewayError,
    WebhookEvent,
    decode_payload,
)

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment processor unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment processor unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSessionResult:
        self.calls.append({"method": "create_checkout_session", "request": request})
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)

        session_id = f"cs_fake_{uuid4().hex[:16]}"
        return CheckoutSessionResult(session_id=session_id, url=f"https://checkout.fake/pay/{session_id}")

    def parse_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        if signature != TEST_SIGNATURE:
            raise InvalidWebhookSignature("Invalid webhook signature")
        return WebhookEvent.from_payload(decode_payload(payload))
