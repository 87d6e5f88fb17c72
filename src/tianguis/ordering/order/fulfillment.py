"""Order fulfilment — status changes, tracking and cancellation.

Vendors act only on their own orders: commands from a vendor carry its
``vendor_id`` and the handler refuses orders sold by anyone else. Admin
commands leave ``vendor_id`` empty.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.domain import tianguis
from tianguis.ordering.order.order import Order, OrderStatus


@tianguis.command(part_of=Order)
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    vendor_id = Identifier()
    reason = Text()  # Used when status is "cancelled"


@tianguis.command(part_of=Order)
class AddTracking:
    order_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_number = String(required=True, max_length=100)
    vendor_id = Identifier()


@tianguis.command(part_of=Order)
class CancelOrder:
    order_id = Identifier(required=True)
    reason = Text(required=True)
    cancelled_by = String(required=True, max_length=50)
    vendor_id = Identifier()


def _load_order(repo, order_id, vendor_id=None) -> Order:
    order = repo.get(order_id)
    if vendor_id and str(order.vendor_id) != str(vendor_id):
        raise ValidationError({"order_id": ["Order does not belong to this vendor"]})
    return order


@tianguis.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = _load_order(repo, command.order_id, command.vendor_id)

        status = OrderStatus(command.status)
        if status == OrderStatus.PROCESSING:
            order.mark_processing()
        elif status == OrderStatus.DELIVERED:
            order.mark_delivered()
        elif status == OrderStatus.CANCELLED:
            order.cancel(reason=command.reason or "Cancelled by vendor", cancelled_by="vendor" if command.vendor_id else "admin")
        elif status == OrderStatus.SHIPPED:
            raise ValidationError({"status": ["Add a tracking number to ship an order"]})
        else:
            raise ValidationError({"status": ["Orders cannot be moved back to pending"]})

        repo.add(order)

    @handle(AddTracking)
    def add_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = _load_order(repo, command.order_id, command.vendor_id)
        order.add_tracking(carrier=command.carrier, tracking_number=command.tracking_number)
        repo.add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = _load_order(repo, command.order_id, command.vendor_id)
        order.cancel(reason=command.reason, cancelled_by=command.cancelled_by)
        repo.add(order)
