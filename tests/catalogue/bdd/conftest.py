"""Shared BDD fixtures and step definitions for the catalogue."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from tianguis.catalogue.product.product import ModerationStatus, Product


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@given("a product submitted by a vendor", target_fixture="product")
def submitted_product():
    product = Product.create(
        vendor_id="vendor-1",
        category_id="cat-1",
        name="Alebrije de copal",
        price=850.0,
        stock=10,
    )
    product._events.clear()
    return product


@given(parsers.parse('the product was rejected for "{reason}"'), target_fixture="product")
def rejected_product(product, reason):
    product.moderate(ModerationStatus.REJECTED.value, moderator_id="admin-1", notes=reason)
    product._events.clear()
    return product


@given(parsers.parse("the product has {count:d} units in stock"), target_fixture="product")
def product_with_stock(product, count):
    product.set_stock(count)
    product._events.clear()
    return product


@then(parsers.parse('the product moderation status is "{status}"'))
def moderation_status_is(product, status):
    assert product.moderation_status == status


@then("the product is listed on the storefront")
def product_is_listed(product):
    assert product.is_listed is True


@then("the product is not listed on the storefront")
def product_is_not_listed(product):
    assert product.is_listed is False


@then(parsers.parse("the product has {count:d} units in stock"))
def product_stock_is(product, count):
    assert product.stock == count


@then("the moderation is refused")
@then("the sale is refused")
def refused(error):
    assert isinstance(error["exc"], ValidationError)
