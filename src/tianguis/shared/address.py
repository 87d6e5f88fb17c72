"""Postal address value object shared by checkout sessions and orders."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from tianguis.domain import tianguis

HOME_COUNTRY = "MX"


@tianguis.value_object
class Address:
    """Shipping destination captured at checkout."""

    full_name: String(required=True, max_length=150)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    postal_code: String(required=True, max_length=20)
    country: String(required=True, max_length=2, default=HOME_COUNTRY)
    phone: String(max_length=30)

    @invariant.post
    def country_must_be_iso_alpha2(self):
        if not self.country or len(self.country) != 2 or not self.country.isalpha():
            raise ValidationError({"country": ["Country must be a two-letter ISO code"]})

    @property
    def is_domestic(self) -> bool:
        return self.country.upper() == HOME_COUNTRY
