"""StartCheckout — price a client cart and open a hosted payment session.

Every rejection (empty cart, stock conflict, invalid coupon, maintenance
mode) is raised as a ValidationError before the payment processor is
contacted. Processor failures propagate as PaymentGatewayError. The session
is persisted only once the processor has accepted it.
"""

import json
import os

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.backoffice.settings import get_settings
from tianguis.domain import tianguis
from tianguis.identity.account import normalize_email
from tianguis.ordering.cart import parse_cart, resolve_lines
from tianguis.ordering.checkout.session import CheckoutSession
from tianguis.ordering.pricing import CheckoutBreakdown, PricingRules, price_checkout
from tianguis.payments.gateway import get_gateway
from tianguis.payments.gateway.port import CheckoutSessionRequest, SessionLineItem
from tianguis.promotions.validation import CANNOT_COMBINE, validate_coupon
from tianguis.shared.address import Address

logger = structlog.get_logger(__name__)

_DEFAULT_SUCCESS_URL = "http://localhost:3000/checkout/success?session_id={CHECKOUT_SESSION_ID}"
_DEFAULT_CANCEL_URL = "http://localhost:3000/cart"


@tianguis.command(part_of=CheckoutSession)
class StartCheckout:
    items = Text(required=True)  # JSON: [{"product_id", "quantity"}]
    customer_email = String(required=True, max_length=254)
    customer_name = String(max_length=150)
    customer_id = Identifier()
    shipping_address = Text(required=True)  # JSON: address dict
    coupon_codes = Text()  # JSON: list of codes; at most one may be used


def _load(raw):
    return json.loads(raw) if isinstance(raw, str) else raw


def _single_coupon_code(raw_codes) -> str | None:
    codes = {str(code).strip().upper() for code in (_load(raw_codes) or []) if code and str(code).strip()}
    if len(codes) > 1:
        raise ValidationError({"coupon_code": [CANNOT_COMBINE]})
    return codes.pop() if codes else None


def build_session_request(checkout_id: str, breakdown: CheckoutBreakdown, customer_email: str) -> CheckoutSessionRequest:
    """Translate a breakdown into the processor request, one shipping line per vendor."""
    line_items = [
        SessionLineItem(
            name=line.name,
            unit_amount=line.unit_price,
            quantity=line.quantity,
            vendor_id=line.vendor_id,
            product_id=line.product_id,
        )
        for group in breakdown.groups
        for line in group.lines
    ]
    for index, group in enumerate(breakdown.groups, start=1):
        if group.shipping > 0:
            line_items.append(
                SessionLineItem(
                    name=f"Envío (paquete {index})",
                    unit_amount=group.shipping,
                    quantity=1,
                    kind="shipping",
                    vendor_id=group.vendor_id,
                )
            )
    if breakdown.tax > 0:
        line_items.append(SessionLineItem(name="IVA", unit_amount=breakdown.tax, quantity=1, kind="tax"))

    metadata = {
        "checkout_id": checkout_id,
        "customer_email": customer_email,
        "vendor_ids": ",".join(group.vendor_id for group in breakdown.groups),
    }
    if breakdown.coupon_code:
        metadata["coupon_code"] = breakdown.coupon_code

    return CheckoutSessionRequest(
        checkout_id=checkout_id,
        customer_email=customer_email,
        currency=breakdown.currency,
        line_items=line_items,
        discount_amount=breakdown.discount,
        metadata=metadata,
        success_url=os.getenv("CHECKOUT_SUCCESS_URL", _DEFAULT_SUCCESS_URL),
        cancel_url=os.getenv("CHECKOUT_CANCEL_URL", _DEFAULT_CANCEL_URL),
    )


@tianguis.command_handler(part_of=CheckoutSession)
class StartCheckoutHandler:
    @handle(StartCheckout)
    def start_checkout(self, command):
        settings = get_settings()
        if settings["maintenance_mode"]:
            raise ValidationError({"checkout": ["The marketplace is in maintenance mode; please try again later"]})

        customer_email = normalize_email(command.customer_email)
        coupon_code = _single_coupon_code(command.coupon_codes)
        address = Address(**_load(command.shipping_address))

        try:
            lines = resolve_lines(parse_cart(_load(command.items)))
        except ValidationError as exc:
            logger.info("checkout.rejected", customer_email=customer_email, reasons=exc.messages)
            raise

        coupon = None
        if coupon_code:
            coupon = validate_coupon(
                coupon_code,
                lines,
                customer_email=customer_email,
                customer_id=command.customer_id,
            )

        breakdown = price_checkout(lines, PricingRules.from_settings(settings), address.country, coupon)
        session = CheckoutSession.open(
            breakdown,
            customer_email=customer_email,
            shipping_address=address,
            customer_id=command.customer_id,
            customer_name=command.customer_name,
        )

        request = build_session_request(str(session.id), breakdown, customer_email)
        result = get_gateway().create_checkout_session(request)
        session.attach_gateway_session(result.session_id, result.url)
        current_domain.repository_for(CheckoutSession).add(session)

        logger.info(
            "checkout.session_created",
            checkout_id=str(session.id),
            vendor_groups=len(breakdown.groups),
            total=breakdown.total,
            coupon_code=breakdown.coupon_code,
        )
        return {
            "checkout_id": str(session.id),
            "session_id": result.session_id,
            "url": result.url,
            "breakdown": breakdown.to_dict(),
        }
