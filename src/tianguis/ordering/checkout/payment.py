"""Payment outcome for a checkout — fan out into per-vendor orders.

``ConfirmCheckoutPayment`` runs as a single command, so all of a payment
event's writes share one unit of work: every vendor order, the stock
decrements, the coupon redemption and the session update commit or roll back
together. Stock is re-checked for every line before anything is written, so
stock never drops below zero. A processor retry of an already completed
checkout returns the existing orders instead of creating duplicates.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.catalogue.product.product import Product
from tianguis.domain import tianguis
from tianguis.ordering.checkout.session import CheckoutSession, CheckoutStatus
from tianguis.ordering.order.order import Order
from tianguis.promotions.coupon import Coupon, CouponRedemption
from tianguis.utils.query import all_items

logger = structlog.get_logger(__name__)


class StockConflict(ValidationError):
    """A paid checkout whose lines can no longer be fulfilled from stock."""


@tianguis.command(part_of=CheckoutSession)
class ConfirmCheckoutPayment:
    checkout_id = Identifier(required=True)
    payment_reference = String(max_length=255)


@tianguis.command(part_of=CheckoutSession)
class FailCheckoutPayment:
    checkout_id = Identifier(required=True)
    reason = Text()


def orders_for_checkout(checkout_id) -> list[Order]:
    """All sibling vendor orders of a checkout, oldest first."""
    dao = current_domain.repository_for(Order)._dao
    return all_items(dao.query.filter(checkout_id=str(checkout_id)).order_by("placed_at"))


@tianguis.command_handler(part_of=CheckoutSession)
class CheckoutPaymentHandler:
    @handle(ConfirmCheckoutPayment)
    def confirm_payment(self, command):
        session_repo = current_domain.repository_for(CheckoutSession)
        session = session_repo.get(command.checkout_id)

        if session.status == CheckoutStatus.COMPLETED.value:
            logger.info("checkout.duplicate_confirmation", checkout_id=str(session.id))
            return [str(order.id) for order in orders_for_checkout(session.id)]

        product_repo = current_domain.repository_for(Product)
        products = {str(line.product_id): product_repo.get(line.product_id) for line in session.lines}

        shortages = [
            f"Insufficient stock for '{line.name}': requested {line.quantity}, "
            f"available {products[str(line.product_id)].stock}"
            for line in session.lines
            if products[str(line.product_id)].stock < line.quantity
        ]
        if shortages:
            # Paid but unfulfillable; surfaced for a manual refund
            logger.error("checkout.stock_conflict", checkout_id=str(session.id), shortages=shortages)
            raise StockConflict({"stock": shortages})

        for line in session.lines:
            products[str(line.product_id)].decrement_stock(line.quantity)

        order_repo = current_domain.repository_for(Order)
        orders = []
        for group in session.groups:
            order = Order.place(
                checkout_id=session.id,
                vendor_id=group.vendor_id,
                customer_email=session.customer_email,
                shipping_address=session.shipping_address,
                lines=[
                    {
                        "product_id": line.product_id,
                        "vendor_id": line.vendor_id,
                        "name": line.name,
                        "unit_price": line.unit_price,
                        "quantity": line.quantity,
                    }
                    for line in session.lines_for(group.vendor_id)
                ],
                amounts={
                    "subtotal": group.subtotal,
                    "discount": group.discount,
                    "shipping": group.shipping,
                    "tax": group.tax,
                    "total": group.total,
                },
                customer_id=session.customer_id,
                customer_name=session.customer_name,
                currency=session.currency,
                coupon_code=session.coupon_code,
                payment_reference=command.payment_reference,
            )
            orders.append(order)

        if session.coupon_id:
            coupon_repo = current_domain.repository_for(Coupon)
            coupon = coupon_repo.get(session.coupon_id)
            coupon.record_use()
            coupon_repo.add(coupon)
            current_domain.repository_for(CouponRedemption).add(
                CouponRedemption(
                    coupon_id=coupon.id,
                    code=coupon.code,
                    checkout_id=session.id,
                    customer_id=session.customer_id,
                    customer_email=session.customer_email,
                    discount_amount=session.discount,
                )
            )

        session.complete(command.payment_reference)

        for product in products.values():
            product_repo.add(product)
        for order in orders:
            order_repo.add(order)
        session_repo.add(session)

        logger.info(
            "checkout.orders_placed",
            checkout_id=str(session.id),
            order_numbers=[o.order_number for o in orders],
            total=session.total,
        )
        return [str(order.id) for order in orders]

    @handle(FailCheckoutPayment)
    def fail_payment(self, command):
        session_repo = current_domain.repository_for(CheckoutSession)
        session = session_repo.get(command.checkout_id)
        reason = command.reason or "Payment failed"

        if session.status == CheckoutStatus.COMPLETED.value:
            # A declined attempt can be reported after a retry in the same session succeeded
            logger.warning("checkout.late_failure_ignored", checkout_id=str(session.id), reason=reason)
            return session.status

        session.fail(reason)
        session_repo.add(session)
        logger.warning("checkout.payment_failed", checkout_id=str(session.id), reason=reason)
        return session.status
