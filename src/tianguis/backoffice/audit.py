"""Audit log — append-only record of administrative and commercial actions.

Entries are written by event handlers reacting to the aggregates they
describe, and by ``RecordAuditEntry`` for actions that have no domain event
of their own (sign-ins, for example).
"""

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.backoffice.settings import PlatformSetting, SettingChanged
from tianguis.catalogue.product.events import ProductImageModerated, ProductModerated
from tianguis.catalogue.product.product import Product
from tianguis.domain import tianguis
from tianguis.ordering.order.events import OrderCancelled, OrderPlaced
from tianguis.ordering.order.order import Order
from tianguis.vendors.vendor import Vendor, VendorApproved, VendorRejected


class AuditCategory(Enum):
    AUTH = "auth"
    VENDOR = "vendor"
    PRODUCT = "product"
    ORDER = "order"
    SETTINGS = "settings"
    COUPON = "coupon"
    USER = "user"


class AuditSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@tianguis.aggregate
class AuditEntry:
    action: String(required=True, max_length=100)
    category: String(required=True, choices=AuditCategory)
    severity: String(choices=AuditSeverity, default=AuditSeverity.INFO.value)
    actor_id: Identifier()
    actor_email: String(max_length=254)
    actor_role: String(max_length=50)
    ip_address: String(max_length=45)
    user_agent: String(max_length=500)
    resource_type: String(max_length=50)
    resource_id: String(max_length=100)
    details: Text()  # JSON
    created_at: DateTime(default=datetime.now)

    @property
    def decoded_details(self) -> dict:
        return json.loads(self.details) if self.details else {}


def record(action: str, category: AuditCategory, resource_type=None, resource_id=None, details=None, **actor):
    entry = AuditEntry(
        action=action,
        category=category.value,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id else None,
        details=json.dumps(details or {}, default=str),
        **actor,
    )
    current_domain.repository_for(AuditEntry).add(entry)
    return entry


@tianguis.command(part_of=AuditEntry)
class RecordAuditEntry:
    action = String(required=True, max_length=100)
    category = String(required=True, choices=AuditCategory)
    severity = String(choices=AuditSeverity, default=AuditSeverity.INFO.value)
    actor_id = Identifier()
    actor_email = String(max_length=254)
    actor_role = String(max_length=50)
    ip_address = String(max_length=45)
    user_agent = String(max_length=500)
    resource_type = String(max_length=50)
    resource_id = String(max_length=100)
    details = Text()


_ENTRY_FIELDS = (
    "action",
    "category",
    "severity",
    "actor_id",
    "actor_email",
    "actor_role",
    "ip_address",
    "user_agent",
    "resource_type",
    "resource_id",
    "details",
)


@tianguis.command_handler(part_of=AuditEntry)
class AuditEntryHandler:
    @handle(RecordAuditEntry)
    def record_entry(self, command):
        entry = AuditEntry(
            **{field: getattr(command, field) for field in _ENTRY_FIELDS if getattr(command, field) is not None}
        )
        current_domain.repository_for(AuditEntry).add(entry)
        return str(entry.id)


@tianguis.event_handler(part_of=Vendor)
class VendorAuditor:
    @handle(VendorApproved)
    def on_vendor_approved(self, event: VendorApproved) -> None:
        record(
            "vendor.approved",
            AuditCategory.VENDOR,
            resource_type="vendor",
            resource_id=event.vendor_id,
            details={"business_name": event.business_name},
            actor_id=event.reviewed_by,
        )

    @handle(VendorRejected)
    def on_vendor_rejected(self, event: VendorRejected) -> None:
        record(
            "vendor.rejected",
            AuditCategory.VENDOR,
            resource_type="vendor",
            resource_id=event.vendor_id,
            details={"business_name": event.business_name, "reason": event.reason},
            actor_id=event.reviewed_by,
        )


@tianguis.event_handler(part_of=Product)
class ProductAuditor:
    @handle(ProductModerated)
    def on_product_moderated(self, event: ProductModerated) -> None:
        record(
            f"product.{event.status}",
            AuditCategory.PRODUCT,
            resource_type="product",
            resource_id=event.product_id,
            details={"previous_status": event.previous_status, "notes": event.notes},
            actor_id=event.moderator_id,
        )

    @handle(ProductImageModerated)
    def on_image_moderated(self, event: ProductImageModerated) -> None:
        record(
            f"image.{event.status}",
            AuditCategory.PRODUCT,
            resource_type="product_image",
            resource_id=event.image_id,
            details={
                "product_id": str(event.product_id),
                "url": event.image_url,
                "reason": event.reason,
                "category": event.category,
            },
            actor_id=event.moderator_id,
        )


@tianguis.event_handler(part_of=Order)
class OrderAuditor:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        record(
            "order.placed",
            AuditCategory.ORDER,
            resource_type="order",
            resource_id=event.order_id,
            details={"order_number": event.order_number, "vendor_id": str(event.vendor_id), "total": event.total},
            actor_email=event.customer_email,
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        record(
            "order.cancelled",
            AuditCategory.ORDER,
            resource_type="order",
            resource_id=event.order_id,
            details={"order_number": event.order_number, "reason": event.reason},
            actor_role=event.cancelled_by,
            severity=AuditSeverity.WARNING.value,
        )


@tianguis.event_handler(part_of=PlatformSetting)
class SettingsAuditor:
    @handle(SettingChanged)
    def on_setting_changed(self, event: SettingChanged) -> None:
        record(
            "settings.update",
            AuditCategory.SETTINGS,
            resource_type="setting",
            resource_id=event.key,
            details={
                "category": event.category,
                "previous": json.loads(event.previous_value) if event.previous_value else None,
                "new": json.loads(event.new_value),
            },
            actor_id=event.updated_by,
        )


@dataclass
class AuditPage:
    entries: list[AuditEntry]
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return (self.total_count + self.limit - 1) // self.limit if self.total_count else 0


def list_audit_entries(
    category: str | None = None,
    action: str | None = None,
    severity: str | None = None,
    resource_type: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> AuditPage:
    filters = {
        key: value
        for key, value in {
            "category": category,
            "action": action,
            "severity": severity,
            "resource_type": resource_type,
        }.items()
        if value
    }
    page = max(page, 1)
    dao = current_domain.repository_for(AuditEntry)._dao
    query = dao.query.filter(**filters) if filters else dao.query
    result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
    return AuditPage(entries=result.items, page=page, limit=limit, total_count=result.total)
