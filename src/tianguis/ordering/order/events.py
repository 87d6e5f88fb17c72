"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from tianguis.domain import tianguis
from tianguis.ordering.order.order import Order


@tianguis.event(part_of=Order)
class OrderPlaced:
    """A vendor group of a paid checkout became an order."""

    __version__ = 1

    order_id: Identifier(required=True)
    order_number: String(required=True)
    checkout_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    customer_email: String(required=True)
    total: Float(required=True)
    currency: String(required=True)
    item_count: Integer(required=True)
    placed_at: DateTime(required=True)


@tianguis.event(part_of=Order)
class OrderStatusChanged:
    __version__ = 1

    order_id: Identifier(required=True)
    previous_status: String(required=True)
    status: String(required=True)


@tianguis.event(part_of=Order)
class OrderShipped:
    __version__ = 1

    order_id: Identifier(required=True)
    order_number: String(required=True)
    carrier: String()
    tracking_number: String(required=True)
    customer_email: String(required=True)


@tianguis.event(part_of=Order)
class OrderCancelled:
    __version__ = 1

    order_id: Identifier(required=True)
    order_number: String(required=True)
    vendor_id: Identifier(required=True)
    reason: Text()
    cancelled_by: String(required=True)
    items: Text(required=True)  # JSON: [{"product_id", "quantity"}]
