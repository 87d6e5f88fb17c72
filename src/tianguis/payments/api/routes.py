"""FastAPI routes for payment processor callbacks."""

import structlog
from fastapi import APIRouter, HTTPException, Request
from protean.utils.globals import current_domain

from tianguis.ordering.checkout.payment import ConfirmCheckoutPayment, FailCheckoutPayment, StockConflict
from tianguis.ordering.checkout.session import CheckoutStatus
from tianguis.payments.api.schemas import ConfigureGatewayRequest, WebhookResponse
from tianguis.payments.gateway import get_gateway
from tianguis.payments.gateway.fake_adapter import FakeGateway
from tianguis.payments.gateway.port import InvalidWebhookSignature
from tianguis.utils.logging import current_environment

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])

COMPLETED_EVENTS = frozenset({"checkout.session.completed"})
FAILED_EVENTS = frozenset({"payment_intent.payment_failed", "checkout.session.expired"})


@router.post("/webhook", response_model=WebhookResponse)
async def webhook(request: Request) -> WebhookResponse:
    gateway = get_gateway()
    payload = await request.body()
    try:
        event = gateway.parse_webhook(payload, request.headers.get(gateway.signature_header, ""))
    except InvalidWebhookSignature as exc:
        logger.warning("webhook.rejected", reason=str(exc))
        raise HTTPException(status_code=400, detail=str(exc)) from None

    if event.checkout_id is None or event.type not in COMPLETED_EVENTS | FAILED_EVENTS:
        logger.info("webhook.ignored", event_type=event.type)
        return WebhookResponse(status="ignored")

    if event.type in FAILED_EVENTS:
        command = FailCheckoutPayment(
            checkout_id=event.checkout_id,
            reason=event.failure_reason or event.type,
        )
        outcome = current_domain.process(command, asynchronous=False)
        if outcome == CheckoutStatus.COMPLETED.value:
            return WebhookResponse(status="ignored")
        return WebhookResponse(status="failed")

    try:
        order_ids = current_domain.process(
            ConfirmCheckoutPayment(checkout_id=event.checkout_id, payment_reference=event.payment_reference),
            asynchronous=False,
        )
    except StockConflict as exc:
        # Paid but unfulfillable; acknowledged so the processor stops retrying
        current_domain.process(
            FailCheckoutPayment(checkout_id=event.checkout_id, reason=f"Stock conflict: {exc.messages}"),
            asynchronous=False,
        )
        return WebhookResponse(status="stock_conflict")

    return WebhookResponse(status="completed", order_ids=order_ids)


@router.post("/gateway/configure")
async def configure_gateway(body: ConfigureGatewayRequest) -> dict:
    if current_environment() == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration is disabled in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=409, detail="Only the fake gateway can be configured")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return {"should_succeed": gateway.should_succeed, "failure_reason": gateway.failure_reason}
