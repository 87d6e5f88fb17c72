"""Pydantic request/response schemas for the Payments API."""

from pydantic import BaseModel


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Payment processor unavailable"


class WebhookResponse(BaseModel):
    received: bool = True
    status: str
    order_ids: list[str] = []
