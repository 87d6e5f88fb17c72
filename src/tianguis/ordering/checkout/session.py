"""CheckoutSession aggregate — a priced, vendor-partitioned cart awaiting payment."""

from datetime import datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from tianguis.domain import tianguis
from tianguis.shared.address import Address


class CheckoutStatus(Enum):
    OPEN = "open"
    COMPLETED = "completed"
    FAILED = "failed"


@tianguis.entity(part_of="CheckoutSession")
class CheckoutLine:
    product_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    category_id: Identifier()
    name: String(required=True, max_length=255)
    unit_price: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=1)


@tianguis.entity(part_of="CheckoutSession")
class CheckoutGroup:
    vendor_id: Identifier(required=True)
    subtotal: Float(required=True, min_value=0.0)
    discount: Float(default=0.0, min_value=0.0)
    shipping: Float(default=0.0, min_value=0.0)
    tax: Float(default=0.0, min_value=0.0)
    total: Float(required=True, min_value=0.0)


@tianguis.aggregate
class CheckoutSession:
    customer_id: Identifier()
    customer_email: String(required=True, max_length=254)
    customer_name: String(max_length=150)
    shipping_address: ValueObject(Address, required=True)
    coupon_id: Identifier()
    coupon_code: String(max_length=50)
    currency: String(max_length=3, default="MXN")
    subtotal: Float(required=True)
    discount: Float(default=0.0)
    shipping: Float(default=0.0)
    tax: Float(default=0.0)
    total: Float(required=True)
    lines: HasMany(CheckoutLine)
    groups: HasMany(CheckoutGroup)
    status: String(choices=CheckoutStatus, default=CheckoutStatus.OPEN.value)
    gateway_session_id: String(max_length=255)
    checkout_url: String(max_length=1000)
    payment_reference: String(max_length=255)
    failure_reason: Text()
    created_at: DateTime(default=datetime.now)
    completed_at: DateTime()

    @classmethod
    def open(cls, breakdown, customer_email, shipping_address, customer_id=None, customer_name=None):
        return cls(
            customer_id=customer_id,
            customer_email=customer_email,
            customer_name=customer_name,
            shipping_address=shipping_address,
            coupon_id=breakdown.coupon_id,
            coupon_code=breakdown.coupon_code,
            currency=breakdown.currency,
            subtotal=breakdown.subtotal,
            discount=breakdown.discount,
            shipping=breakdown.shipping,
            tax=breakdown.tax,
            total=breakdown.total,
            lines=[
                CheckoutLine(
                    product_id=line.product_id,
                    vendor_id=line.vendor_id,
                    category_id=line.category_id,
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                )
                for group in breakdown.groups
                for line in group.lines
            ],
            groups=[
                CheckoutGroup(
                    vendor_id=group.vendor_id,
                    subtotal=group.subtotal,
                    discount=group.discount,
                    shipping=group.shipping,
                    tax=group.tax,
                    total=group.total,
                )
                for group in breakdown.groups
            ],
        )

    def lines_for(self, vendor_id) -> list[CheckoutLine]:
        return [line for line in self.lines if str(line.vendor_id) == str(vendor_id)]

    def attach_gateway_session(self, session_id, url):
        self.gateway_session_id = session_id
        self.checkout_url = url

    def complete(self, payment_reference):
        if self.status == CheckoutStatus.COMPLETED.value:
            raise ValidationError({"status": ["Checkout is already completed"]})
        self.status = CheckoutStatus.COMPLETED.value
        self.payment_reference = payment_reference
        self.failure_reason = None
        self.completed_at = datetime.now()

    def fail(self, reason):
        self.status = CheckoutStatus.FAILED.value
        self.failure_reason = reason
