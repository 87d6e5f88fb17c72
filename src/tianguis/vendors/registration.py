"""Vendor registration and profile maintenance — commands and handler.

Registering creates the Vendor in ``pending`` status together with the login
account its staff will use; both land in the same unit of work.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.domain import tianguis
from tianguis.identity.account import Role, UserAccount, find_account_by_email
from tianguis.vendors.vendor import Vendor

_PROFILE_FIELDS = ("phone", "website", "description", "street", "city", "state", "postal_code", "country")


@tianguis.command(part_of=Vendor)
class RegisterVendor:
    business_name = String(required=True, max_length=200)
    contact_name = String(required=True, max_length=150)
    email = String(required=True, max_length=254)
    password = String(required=True, max_length=128)
    phone = String(max_length=30)
    website = String(max_length=255)
    description = Text()
    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=2)


@tianguis.command(part_of=Vendor)
class UpdateVendorProfile:
    vendor_id = Identifier(required=True)
    business_name = String(max_length=200)
    contact_name = String(max_length=150)
    phone = String(max_length=30)
    website = String(max_length=255)
    description = Text()
    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=2)


@tianguis.command_handler(part_of=Vendor)
class VendorRegistrationHandler:
    @handle(RegisterVendor)
    def register_vendor(self, command):
        vendor_repo = current_domain.repository_for(Vendor)
        email = command.email.strip().lower()

        if vendor_repo._dao.query.filter(email=email).all().items or find_account_by_email(email):
            raise ValidationError({"email": ["A vendor or account with this email already exists"]})

        profile = {name: getattr(command, name) for name in _PROFILE_FIELDS if getattr(command, name) is not None}
        vendor = Vendor.register(
            business_name=command.business_name,
            contact_name=command.contact_name,
            email=email,
            **profile,
        )
        account = UserAccount.register(
            email=email,
            name=command.contact_name,
            password=command.password,
            role=Role.VENDOR.value,
            vendor_id=vendor.id,
        )

        vendor_repo.add(vendor)
        current_domain.repository_for(UserAccount).add(account)
        return str(vendor.id)

    @handle(UpdateVendorProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(Vendor)
        vendor = repo.get(command.vendor_id)
        vendor.update_profile(
            business_name=command.business_name,
            contact_name=command.contact_name,
            **{name: getattr(command, name) for name in _PROFILE_FIELDS},
        )
        repo.add(vendor)
