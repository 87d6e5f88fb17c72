"""Shared BDD fixtures and step definitions for checkout."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from tianguis.catalogue.product.product import Product
from tianguis.ordering.checkout.payment import ConfirmCheckoutPayment
from tianguis.ordering.checkout.session import CheckoutSession
from tianguis.ordering.order.lookup import orders_for_vendor


@pytest.fixture()
def market():
    """Vendor and product ids by display name."""
    return {"vendors": {}, "products": {}}


@pytest.fixture()
def checkout():
    """Container for the checkout result or the refusal."""
    return {"cart": [], "result": None, "exc": None}


@given(parsers.parse('vendor "{vendor}" sells "{product}" at {price:f} with {stock:d} in stock'))
def vendor_sells(market, make_vendor, make_product, vendor, product, price, stock):
    if vendor not in market["vendors"]:
        market["vendors"][vendor] = make_vendor(vendor)
    market["products"][product] = make_product(market["vendors"][vendor], name=product, price=price, stock=stock)


@given(parsers.re(r'a cart with (?P<quantity>\d+) "(?P<product>[^"]+)"$'), converters={"quantity": int})
def cart_with_one(market, checkout, quantity, product):
    checkout["cart"] = [{"product_id": market["products"][product], "quantity": quantity}]


@given(parsers.parse('a cart with {first_qty:d} "{first}" and {second_qty:d} "{second}"'))
def cart_with_two(market, checkout, first_qty, first, second_qty, second):
    checkout["cart"] = [
        {"product_id": market["products"][first], "quantity": first_qty},
        {"product_id": market["products"][second], "quantity": second_qty},
    ]


@when("the shopper starts checkout")
@given("the shopper has started checkout")
def start(checkout, start_checkout):
    try:
        checkout["result"] = start_checkout(checkout["cart"])
    except ValidationError as exc:
        checkout["exc"] = exc


@when("the payment is confirmed")
def confirm(checkout):
    current_domain.process(
        ConfirmCheckoutPayment(checkout_id=checkout["result"]["checkout_id"], payment_reference="pi_bdd"),
        asynchronous=False,
    )


@then(parsers.parse("the checkout has {count:d} vendor groups"))
def group_count(checkout, count):
    assert len(checkout["result"]["breakdown"]["groups"]) == count


@then(parsers.parse("every vendor group is charged shipping of {amount:f}"))
def group_shipping(checkout, amount):
    assert all(g["shipping"] == amount for g in checkout["result"]["breakdown"]["groups"])


@then(parsers.parse("the checkout total is {amount:f}"))
def checkout_total(checkout, amount):
    assert checkout["result"]["breakdown"]["total"] == pytest.approx(amount)


@then("the checkout is refused")
def refused(checkout):
    assert isinstance(checkout["exc"], ValidationError)


@then("no checkout session exists")
def no_session():
    assert current_domain.repository_for(CheckoutSession)._dao.query.all().items == []


@then(parsers.parse('"{vendor}" has {count:d} order'))
def vendor_order_count(market, vendor, count):
    assert len(orders_for_vendor(market["vendors"][vendor])) == count


@then(parsers.parse('"{product}" has {count:d} in stock'))
def product_stock(market, product, count):
    assert current_domain.repository_for(Product).get(market["products"][product]).stock == count
