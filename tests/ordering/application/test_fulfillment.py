"""Application tests for order fulfilment, cancellation and lookup."""

from datetime import datetime, timedelta

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from tianguis.catalogue.product.product import Product
from tianguis.ordering.checkout.payment import ConfirmCheckoutPayment, FailCheckoutPayment
from tianguis.ordering.checkout.session import CheckoutSession, CheckoutStatus
from tianguis.ordering.order.fulfillment import AddTracking, CancelOrder, UpdateOrderStatus
from tianguis.ordering.order.lookup import all_orders, lookup_guest_order, orders_for_customer, orders_for_vendor
from tianguis.ordering.order.order import Order, OrderStatus
from tianguis.shared.address import Address


@pytest.fixture()
def placed(make_vendor, make_product, start_checkout):
    """A paid single-vendor checkout; returns (vendor_id, product_id, order)."""
    vendor_id = make_vendor()
    product_id = make_product(vendor_id, name="Rebozo", price=500.0, stock=5)
    checkout_id = start_checkout([{"product_id": product_id, "quantity": 2}], customer_email="Ana@Example.mx")[
        "checkout_id"
    ]
    (order_id,) = current_domain.process(
        ConfirmCheckoutPayment(checkout_id=checkout_id, payment_reference="pi_1"), asynchronous=False
    )
    return vendor_id, product_id, current_domain.repository_for(Order).get(order_id)


def _reload(order) -> Order:
    return current_domain.repository_for(Order).get(order.id)


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestStatusUpdates:
    def test_vendor_walks_order_to_delivered(self, placed):
        vendor_id, _, order = placed

        _process(UpdateOrderStatus(order_id=order.id, status="processing", vendor_id=vendor_id))
        _process(AddTracking(order_id=order.id, carrier="Estafeta", tracking_number="EST-1", vendor_id=vendor_id))
        _process(UpdateOrderStatus(order_id=order.id, status="delivered", vendor_id=vendor_id))

        order = _reload(order)
        assert order.status == OrderStatus.DELIVERED.value
        assert order.tracking_number == "EST-1"

    def test_shipping_requires_tracking(self, placed):
        vendor_id, _, order = placed
        _process(UpdateOrderStatus(order_id=order.id, status="processing", vendor_id=vendor_id))
        with pytest.raises(ValidationError):
            _process(UpdateOrderStatus(order_id=order.id, status="shipped", vendor_id=vendor_id))

    def test_vendor_cannot_touch_another_vendors_order(self, placed, make_vendor):
        _, _, order = placed
        intruder = make_vendor("Talavera Puebla")
        with pytest.raises(ValidationError):
            _process(UpdateOrderStatus(order_id=order.id, status="processing", vendor_id=intruder))
        assert _reload(order).status == OrderStatus.PENDING.value


class TestCancellation:
    def test_cancellation_restocks_products(self, placed):
        vendor_id, product_id, order = placed
        assert current_domain.repository_for(Product).get(product_id).stock == 3

        _process(CancelOrder(order_id=order.id, reason="Out of thread", cancelled_by="vendor", vendor_id=vendor_id))

        order = _reload(order)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_by == "vendor"
        assert current_domain.repository_for(Product).get(product_id).stock == 5

    def test_vendor_status_cancel_defaults_reason(self, placed):
        vendor_id, _, order = placed
        _process(UpdateOrderStatus(order_id=order.id, status="cancelled", vendor_id=vendor_id))
        assert _reload(order).cancellation_reason == "Cancelled by vendor"

    def test_shipped_order_cannot_be_cancelled(self, placed):
        vendor_id, _, order = placed
        _process(UpdateOrderStatus(order_id=order.id, status="processing", vendor_id=vendor_id))
        _process(AddTracking(order_id=order.id, tracking_number="EST-1", vendor_id=vendor_id))
        with pytest.raises(ValidationError):
            _process(CancelOrder(order_id=order.id, reason="Changed mind", cancelled_by="admin"))

    def test_failure_event_after_completion_leaves_orders_intact(self, placed):
        _, product_id, order = placed
        _process(FailCheckoutPayment(checkout_id=order.checkout_id, reason="card_declined"))

        order = _reload(order)
        assert order.status == OrderStatus.PENDING.value
        assert order.cancelled_by is None
        assert current_domain.repository_for(Product).get(product_id).stock == 3
        session = current_domain.repository_for(CheckoutSession).get(order.checkout_id)
        assert session.status == CheckoutStatus.COMPLETED.value


class TestLookup:
    def test_guest_lookup_matches_email_case_insensitively(self, placed):
        _, _, order = placed
        found = lookup_guest_order("ANA@example.MX", order.order_number.lower())
        assert found.id == order.id

    @pytest.mark.parametrize("field", ["email", "number"])
    def test_mismatch_discloses_nothing(self, placed, field):
        _, _, order = placed
        email = "luis@example.mx" if field == "email" else "ana@example.mx"
        number = "TG-0000-000000" if field == "number" else order.order_number
        with pytest.raises(ObjectNotFoundError, match="Order not found"):
            lookup_guest_order(email, number)

    def test_listings(self, placed):
        vendor_id, _, order = placed
        assert [o.id for o in orders_for_customer(None, "ana@example.mx")] == [order.id]
        assert [o.id for o in orders_for_vendor(vendor_id)] == [order.id]
        assert orders_for_vendor(vendor_id, status="shipped") == []


class TestListingPages:
    @pytest.fixture()
    def history(self, shipping_address):
        """121 single-line orders for one vendor and one buyer, an hour apart."""
        repo = current_domain.repository_for(Order)
        start = datetime(2026, 3, 1, 8, 0)
        numbers = []
        for index in range(121):
            order = Order.place(
                checkout_id=f"chk-{index}",
                vendor_id="vendor-1",
                customer_email="ana@example.mx",
                shipping_address=Address(**shipping_address),
                lines=[
                    {
                        "product_id": "prod-1",
                        "vendor_id": "vendor-1",
                        "name": "Rebozo",
                        "unit_price": 100.0,
                        "quantity": 1,
                    }
                ],
                amounts={"subtotal": 100.0, "discount": 0.0, "shipping": 0.0, "tax": 0.0, "total": 100.0},
                customer_id="cust-1",
            )
            order.placed_at = start + timedelta(hours=index)
            repo.add(order)
            numbers.append(order.order_number)
        return numbers

    def test_newest_orders_come_first(self, history):
        newest = [o.order_number for o in orders_for_vendor("vendor-1", limit=3)]
        assert newest == history[:-4:-1]

    def test_pages_reach_the_oldest_order(self, history):
        last_page = orders_for_vendor("vendor-1", page=3, limit=50)
        assert len(last_page) == 21
        assert last_page[-1].order_number == history[0]

    def test_customer_listing_matches_by_id_or_email(self, history):
        by_id = orders_for_customer("cust-1", None, limit=200)
        by_email = orders_for_customer(None, "ANA@example.mx", limit=200)
        assert len(by_id) == len(by_email) == 121
        assert by_id[0].order_number == history[-1]

    def test_admin_listing_pages(self, history):
        assert len(all_orders(limit=100)) == 100
        assert [o.order_number for o in all_orders(page=2, limit=100)][-1] == history[0]
