"""Shared BDD fixtures and step definitions for promotions."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

from tianguis.ordering.cart import PricedLine
from tianguis.promotions.coupon import DiscountType
from tianguis.promotions.management import CreateCoupon


@pytest.fixture()
def outcome():
    """Container for the applied coupon quote or the refusal."""
    return {"quote": None, "exc": None, "applied": None}


@given(parsers.parse('a platform coupon "{code}" for {percent:d} percent off orders of at least {minimum:d}'))
def percentage_coupon(code, percent, minimum):
    current_domain.process(
        CreateCoupon(
            code=code,
            name=code.title(),
            discount_type=DiscountType.PERCENTAGE.value,
            value=percent,
            minimum_order_amount=minimum,
        ),
        asynchronous=False,
    )


@given(parsers.parse('a platform coupon "{code}" for free shipping'))
def free_shipping_coupon(code):
    current_domain.process(
        CreateCoupon(code=code, name=code.title(), discount_type=DiscountType.FREE_SHIPPING.value),
        asynchronous=False,
    )


@given(parsers.parse("a cart worth {amount:f}"), target_fixture="lines")
def cart_worth(amount):
    return [
        PricedLine(
            product_id="prod-1",
            vendor_id="vendor-1",
            category_id="cat-1",
            name="Rebozo de seda",
            unit_price=amount,
            quantity=1,
        )
    ]


@given(parsers.parse('"{code}" is already applied'))
def already_applied(outcome, code):
    outcome["applied"] = code


@then(parsers.parse('the coupon is refused with "{message}"'))
def refused_with(outcome, message):
    assert isinstance(outcome["exc"], ValidationError)
    assert outcome["exc"].messages["coupon_code"] == [message]


@then(parsers.parse("the discount is {amount:f}"))
def discount_is(outcome, amount):
    assert outcome["exc"] is None
    assert outcome["quote"].discount_amount == pytest.approx(amount)
