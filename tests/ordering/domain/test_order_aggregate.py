"""Tests for the Order aggregate lifecycle."""

import json
import re

import pytest
from protean.exceptions import ValidationError

from tianguis.ordering.order.events import OrderCancelled, OrderPlaced, OrderShipped
from tianguis.ordering.order.order import Order, OrderStatus, generate_order_number
from tianguis.shared.address import Address


def _address():
    return Address(
        full_name="Ana López",
        street="Av. Juárez 100",
        city="Ciudad de México",
        state="CDMX",
        postal_code="06000",
    )


def _place(vendor_id="vendor-a", line_vendor="vendor-a", total=214.0):
    return Order.place(
        checkout_id="chk-1",
        vendor_id=vendor_id,
        customer_email="ana@example.mx",
        shipping_address=_address(),
        lines=[{"product_id": "p-1", "vendor_id": line_vendor, "name": "Rebozo", "unit_price": 50.0, "quantity": 2}],
        amounts={"subtotal": 100.0, "discount": 0.0, "shipping": 99.0, "tax": 15.0, "total": total},
    )


def test_order_number_format():
    assert re.fullmatch(r"TG-\d{4}-[0-9A-F]{6}", generate_order_number())


class TestPlacement:
    def test_place_raises_order_placed(self):
        order = _place()
        assert order.status == OrderStatus.PENDING.value
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.item_count == 2

    def test_lines_must_belong_to_order_vendor(self):
        with pytest.raises(ValidationError):
            _place(line_vendor="vendor-b")

    def test_total_must_match_breakdown(self):
        with pytest.raises(ValidationError):
            _place(total=200.0)


class TestLifecycle:
    def test_happy_path(self):
        order = _place()
        order.mark_processing()
        order.add_tracking("Estafeta", "EST123")
        assert order.status == OrderStatus.SHIPPED.value
        assert isinstance(order._events[-1], OrderShipped)
        order.mark_delivered()
        assert order.status == OrderStatus.DELIVERED.value

    def test_tracking_can_be_corrected_after_shipping(self):
        order = _place()
        order.mark_processing()
        order.add_tracking("Estafeta", "EST123")
        order.add_tracking("DHL", "DHL456")
        assert (order.carrier, order.tracking_number) == ("DHL", "DHL456")

    def test_cannot_ship_pending_order(self):
        with pytest.raises(ValidationError):
            _place().add_tracking("Estafeta", "EST123")

    def test_cannot_skip_to_delivered(self):
        with pytest.raises(ValidationError):
            _place().mark_delivered()

    @pytest.mark.parametrize("advance", [0, 1])
    def test_cancel_from_pending_or_processing(self, advance):
        order = _place()
        if advance:
            order.mark_processing()
        order.cancel("Out of fabric", cancelled_by="vendor")
        event = order._events[-1]
        assert isinstance(event, OrderCancelled)
        assert json.loads(event.items) == [{"product_id": "p-1", "quantity": 2}]

    def test_cannot_cancel_shipped_order(self):
        order = _place()
        order.mark_processing()
        order.add_tracking(None, "EST123")
        with pytest.raises(ValidationError):
            order.cancel("Too late", cancelled_by="admin")
