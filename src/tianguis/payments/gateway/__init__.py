"""Payment gateway factory.

``get_gateway()`` returns Stripe when ``STRIPE_SECRET_KEY`` is configured and
the in-process FakeGateway otherwise. Production refuses to start without both
Stripe secrets. Tests swap adapters with ``set_gateway()`` / ``reset_gateway()``.
"""

import os

from tianguis.payments.gateway.fake_adapter import FakeGateway
from tianguis.payments.gateway.port import PaymentGateway
from tianguis.utils.logging import current_environment

_current_gateway: PaymentGateway | None = None


def _default_gateway() -> PaymentGateway:
    api_key = os.getenv("STRIPE_SECRET_KEY")
    webhook_secret = os.getenv("STRIPE_WEBHOOK_SECRET")
    if current_environment() == "production" and not (api_key and webhook_secret):
        raise RuntimeError("STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET must be set in production")
    if api_key:
        from tianguis.payments.gateway.stripe_adapter import StripeGateway

        return StripeGateway(api_key=api_key, webhook_secret=webhook_secret or "")
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
