"""Order aggregate — one vendor's share of a paid checkout.

A checkout that spans several vendors produces sibling orders linked by
``checkout_id``. Every order holds only lines sold by its own vendor.
"""

import json
from datetime import datetime
from enum import Enum
from uuid import uuid4

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from tianguis.domain import tianguis
from tianguis.shared.address import Address


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PAID = "paid"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"TG-{now:%y%m}-{uuid4().hex[:6].upper()}"


@tianguis.entity(part_of="Order")
class OrderItem:
    product_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    product_name: String(required=True, max_length=255)
    unit_price: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=1)

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)


@tianguis.aggregate
class Order:
    order_number: String(required=True, max_length=30, unique=True)
    checkout_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    customer_id: Identifier()
    customer_email: String(required=True, max_length=254)
    customer_name: String(max_length=150)
    shipping_address: ValueObject(Address, required=True)
    items: HasMany(OrderItem)
    subtotal: Float(required=True, min_value=0.0)
    discount: Float(default=0.0, min_value=0.0)
    shipping: Float(default=0.0, min_value=0.0)
    tax: Float(default=0.0, min_value=0.0)
    total: Float(required=True, min_value=0.0)
    currency: String(max_length=3, default="MXN")
    coupon_code: String(max_length=50)
    status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status: String(choices=PaymentStatus, default=PaymentStatus.PAID.value)
    payment_reference: String(max_length=255)
    carrier: String(max_length=100)
    tracking_number: String(max_length=100)
    cancellation_reason: Text()
    cancelled_by: String(max_length=50)
    placed_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def items_belong_to_order_vendor(self):
        foreign = [item.product_id for item in self.items if str(item.vendor_id) != str(self.vendor_id)]
        if foreign:
            raise ValidationError({"items": ["Order lines must all belong to the order's vendor"]})

    @invariant.post
    def total_matches_breakdown(self):
        expected = round(self.subtotal - (self.discount or 0) + (self.shipping or 0) + (self.tax or 0), 2)
        if abs(expected - self.total) > 0.005:
            raise ValidationError({"total": [f"Total {self.total} does not match breakdown {expected}"]})

    @classmethod
    def place(cls, checkout_id, vendor_id, customer_email, shipping_address, lines, amounts, **details):
        """Create a paid order for one vendor group.

        ``lines`` is a list of dicts with product_id, vendor_id, name,
        unit_price and quantity; ``amounts`` holds subtotal, discount,
        shipping, tax and total.
        """
        from tianguis.ordering.order.events import OrderPlaced

        now = datetime.now()
        order = cls(
            order_number=generate_order_number(now),
            checkout_id=checkout_id,
            vendor_id=vendor_id,
            customer_email=customer_email,
            shipping_address=shipping_address,
            items=[
                OrderItem(
                    product_id=line["product_id"],
                    vendor_id=line["vendor_id"],
                    product_name=line["name"],
                    unit_price=line["unit_price"],
                    quantity=line["quantity"],
                )
                for line in lines
            ],
            placed_at=now,
            updated_at=now,
            **amounts,
            **details,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                checkout_id=checkout_id,
                vendor_id=vendor_id,
                customer_email=customer_email,
                total=order.total,
                currency=order.currency,
                item_count=sum(line["quantity"] for line in lines),
                placed_at=now,
            )
        )
        return order

    def _assert_can_transition(self, target: OrderStatus):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot move order from {current.value} to {target.value}"]})

    def mark_processing(self):
        from tianguis.ordering.order.events import OrderStatusChanged

        self._assert_can_transition(OrderStatus.PROCESSING)
        previous = self.status
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = datetime.now()
        self.raise_(OrderStatusChanged(order_id=self.id, previous_status=previous, status=self.status))

    def add_tracking(self, carrier, tracking_number):
        """Record tracking; the first tracking number ships the order."""
        from tianguis.ordering.order.events import OrderShipped

        if not tracking_number:
            raise ValidationError({"tracking_number": ["Tracking number is required"]})
        if self.status != OrderStatus.SHIPPED.value:
            self._assert_can_transition(OrderStatus.SHIPPED)

        self.carrier = carrier
        self.tracking_number = tracking_number
        self.status = OrderStatus.SHIPPED.value
        self.updated_at = datetime.now()
        self.raise_(
            OrderShipped(
                order_id=self.id,
                order_number=self.order_number,
                carrier=carrier,
                tracking_number=tracking_number,
                customer_email=self.customer_email,
            )
        )

    def mark_delivered(self):
        from tianguis.ordering.order.events import OrderStatusChanged

        self._assert_can_transition(OrderStatus.DELIVERED)
        previous = self.status
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = datetime.now()
        self.raise_(OrderStatusChanged(order_id=self.id, previous_status=previous, status=self.status))

    def cancel(self, reason, cancelled_by):
        from tianguis.ordering.order.events import OrderCancelled

        self._assert_can_transition(OrderStatus.CANCELLED)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.updated_at = datetime.now()
        self.raise_(
            OrderCancelled(
                order_id=self.id,
                order_number=self.order_number,
                vendor_id=self.vendor_id,
                reason=reason,
                cancelled_by=cancelled_by,
                items=json.dumps([{"product_id": str(i.product_id), "quantity": i.quantity} for i in self.items]),
            )
        )
