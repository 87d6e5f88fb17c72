"""Vendor aggregate — a seller's business profile and approval status."""

from datetime import datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

from tianguis.domain import tianguis


class VendorStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@tianguis.aggregate
class Vendor:
    business_name: String(required=True, max_length=200)
    contact_name: String(required=True, max_length=150)
    email: String(required=True, max_length=254, unique=True)
    phone: String(max_length=30)
    website: String(max_length=255)
    description: Text()
    street: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=2, default="MX")
    status: String(choices=VendorStatus, default=VendorStatus.PENDING.value)
    rejection_reason: String(max_length=1000)
    reviewed_by: Identifier()
    reviewed_at: DateTime()
    registered_at: DateTime(default=datetime.now)

    @property
    def is_approved(self) -> bool:
        return self.status == VendorStatus.APPROVED.value

    @classmethod
    def register(cls, business_name, contact_name, email, **profile):
        vendor = cls(
            business_name=business_name,
            contact_name=contact_name,
            email=email.strip().lower(),
            **profile,
        )
        vendor.raise_(
            VendorRegistered(
                vendor_id=vendor.id,
                business_name=vendor.business_name,
                email=vendor.email,
                registered_at=vendor.registered_at,
            )
        )
        return vendor

    def update_profile(self, **changes):
        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)

    def approve(self, reviewed_by, notify=True):
        if self.status == VendorStatus.APPROVED.value:
            raise ValidationError({"status": ["Vendor is already approved"]})

        self.status = VendorStatus.APPROVED.value
        self.rejection_reason = None
        self.reviewed_by = reviewed_by
        self.reviewed_at = datetime.now()
        self.raise_(
            VendorApproved(
                vendor_id=self.id,
                business_name=self.business_name,
                email=self.email,
                contact_name=self.contact_name,
                reviewed_by=reviewed_by,
                notify=notify,
            )
        )

    def reject(self, reviewed_by, reason=None, notify=True):
        if self.status != VendorStatus.PENDING.value:
            raise ValidationError({"status": ["Only pending vendors can be rejected"]})

        self.status = VendorStatus.REJECTED.value
        self.rejection_reason = reason
        self.reviewed_by = reviewed_by
        self.reviewed_at = datetime.now()
        self.raise_(
            VendorRejected(
                vendor_id=self.id,
                business_name=self.business_name,
                email=self.email,
                contact_name=self.contact_name,
                reason=reason,
                reviewed_by=reviewed_by,
                notify=notify,
            )
        )


@tianguis.event(part_of=Vendor)
class VendorRegistered:
    __version__ = 1

    vendor_id: Identifier(required=True)
    business_name: String(required=True)
    email: String(required=True)
    registered_at: DateTime(required=True)


@tianguis.event(part_of=Vendor)
class VendorApproved:
    __version__ = 1

    vendor_id: Identifier(required=True)
    business_name: String(required=True)
    email: String(required=True)
    contact_name: String()
    reviewed_by: Identifier(required=True)
    notify: Boolean(default=True)


@tianguis.event(part_of=Vendor)
class VendorRejected:
    __version__ = 1

    vendor_id: Identifier(required=True)
    business_name: String(required=True)
    email: String(required=True)
    contact_name: String()
    reason: String()
    reviewed_by: Identifier(required=True)
    notify: Boolean(default=True)
