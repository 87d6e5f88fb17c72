"""Stripe Checkout adapter."""

import stripe
import structlog

from tianguis.payments.gateway.port import (
    CheckoutSessionRequest,
    CheckoutSessionResult,
    InvalidWebhookSignature,
    PaymentGateway,
    PaymentGatewayError,
    WebhookEvent,
    decode_payload,
)

logger = structlog.get_logger(__name__)


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


class StripeGateway(PaymentGateway):
    signature_header = "Stripe-Signature"

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def _line_item(self, item, currency: str) -> dict:
        product_metadata = {
            key: value
            for key, value in (("kind", item.kind), ("vendor_id", item.vendor_id), ("product_id", item.product_id))
            if value
        }
        return {
            "price_data": {
                "currency": currency,
                "product_data": {"name": item.name, "metadata": product_metadata},
                "unit_amount": to_minor_units(item.unit_amount),
            },
            "quantity": item.quantity,
        }

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSessionResult:
        currency = request.currency.lower()
        params = {
            "mode": "payment",
            "customer_email": request.customer_email,
            "line_items": [self._line_item(item, currency) for item in request.line_items],
            "metadata": request.metadata,
            "payment_intent_data": {"metadata": request.metadata},
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
        }

        try:
            if request.discount_amount > 0:
                # Checkout has no negative line items; discounts go through a single-use coupon
                coupon = stripe.Coupon.create(
                    api_key=self.api_key,
                    amount_off=to_minor_units(request.discount_amount),
                    currency=currency,
                    duration="once",
                    max_redemptions=1,
                    name=request.metadata.get("coupon_code") or "Discount",
                )
                params["discounts"] = [{"coupon": coupon.id}]

            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                idempotency_key=f"checkout-{request.checkout_id}",
                **params,
            )
        except stripe.StripeError as exc:
            logger.error("stripe.session_failed", checkout_id=request.checkout_id, error=str(exc))
            raise PaymentGatewayError(exc.user_message or str(exc)) from exc

        return CheckoutSessionResult(session_id=session.id, url=session.url)

    def parse_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        if not self.webhook_secret:
            raise InvalidWebhookSignature("Webhook signing secret is not configured")
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise InvalidWebhookSignature(str(exc)) from exc
        return WebhookEvent.from_payload(decode_payload(payload))
