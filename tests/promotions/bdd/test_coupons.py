"""BDD tests for coupon validation."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, when

from tianguis.promotions.validation import validate_coupon

scenarios("features/coupons.feature")


@when(parsers.parse('the shopper applies "{code}"'))
def apply_coupon(outcome, lines, code):
    try:
        outcome["quote"] = validate_coupon(code, lines, applied_code=outcome["applied"])
    except ValidationError as exc:
        outcome["exc"] = exc
