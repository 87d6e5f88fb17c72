"""Application tests for audit entries written in reaction to domain events."""

from datetime import datetime, timedelta

from protean.utils.globals import current_domain

from tianguis.backoffice.audit import AuditCategory, AuditEntry, RecordAuditEntry, list_audit_entries
from tianguis.ordering.checkout.payment import ConfirmCheckoutPayment
from tianguis.ordering.order.fulfillment import CancelOrder
from tianguis.vendors.registration import RegisterVendor
from tianguis.vendors.review import RejectVendor


def _actions(**filters):
    return [e.action for e in list_audit_entries(**filters).entries]


class TestEventAuditing:
    def test_vendor_review_is_audited(self, make_vendor, admin):
        vendor_id = make_vendor()
        entry = list_audit_entries(action="vendor.approved").entries[0]
        assert entry.resource_id == str(vendor_id)
        assert str(entry.actor_id) == str(admin.id)
        assert entry.decoded_details == {"business_name": "Manos de Oaxaca"}

    def test_vendor_rejection_keeps_reason(self, admin):
        vendor_id = current_domain.process(
            RegisterVendor(
                business_name="Barro Negro",
                contact_name="Luis",
                email="luis@example.mx",
                password="vendor-password",
            ),
            asynchronous=False,
        )
        current_domain.process(
            RejectVendor(vendor_id=vendor_id, reviewed_by=admin.id, reason="Incomplete tax id", notify=False),
            asynchronous=False,
        )
        entry = list_audit_entries(action="vendor.rejected").entries[0]
        assert entry.decoded_details["reason"] == "Incomplete tax id"

    def test_product_moderation_is_audited(self, make_vendor, make_product):
        product_id = make_product(make_vendor())
        entry = list_audit_entries(action="product.approved").entries[0]
        assert entry.resource_id == str(product_id)
        assert entry.category == AuditCategory.PRODUCT.value

    def test_order_placement_and_cancellation_are_audited(self, make_vendor, make_product, start_checkout):
        product_id = make_product(make_vendor(), stock=3)
        checkout_id = start_checkout([{"product_id": product_id, "quantity": 1}])["checkout_id"]
        (order_id,) = current_domain.process(ConfirmCheckoutPayment(checkout_id=checkout_id), asynchronous=False)
        current_domain.process(
            CancelOrder(order_id=order_id, reason="Customer request", cancelled_by="admin"), asynchronous=False
        )

        assert sorted(_actions(category="order")) == ["order.cancelled", "order.placed"]
        cancelled = list_audit_entries(action="order.cancelled").entries[0]
        assert cancelled.severity == "warning"
        assert cancelled.actor_role == "admin"


class TestListing:
    def test_pagination_and_filters(self):
        for index in range(5):
            current_domain.process(
                RecordAuditEntry(action="auth.login", category="auth", actor_email=f"user{index}@example.mx"),
                asynchronous=False,
            )
        current_domain.process(
            RecordAuditEntry(action="auth.login_failed", category="auth", severity="warning"),
            asynchronous=False,
        )

        page = list_audit_entries(category="auth", page=2, limit=4)
        assert (page.total_count, page.total_pages, len(page.entries)) == (6, 2, 2)
        assert list_audit_entries(severity="warning").total_count == 1
        assert list_audit_entries(category="coupon").total_pages == 0

    def test_newest_entries_first_beyond_a_hundred(self):
        repo = current_domain.repository_for(AuditEntry)
        start = datetime(2026, 1, 1, 9, 0)
        for index in range(120):
            repo.add(
                AuditEntry(
                    action=f"coupon.check.{index}",
                    category="coupon",
                    created_at=start + timedelta(minutes=index),
                )
            )

        first = list_audit_entries(category="coupon", limit=5)
        assert first.total_count == 120
        assert first.total_pages == 24
        assert [e.action for e in first.entries] == [f"coupon.check.{i}" for i in range(119, 114, -1)]

        last = list_audit_entries(category="coupon", page=24, limit=5)
        assert [e.action for e in last.entries][-1] == "coupon.check.0"
