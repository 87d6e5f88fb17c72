"""Admin review of vendor applications — commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from tianguis.domain import tianguis
from tianguis.utils.query import all_items
from tianguis.vendors.vendor import Vendor

logger = structlog.get_logger(__name__)


@tianguis.command(part_of=Vendor)
class ApproveVendor:
    vendor_id = Identifier(required=True)
    reviewed_by = Identifier(required=True)
    notify = Boolean(default=True)


@tianguis.command(part_of=Vendor)
class RejectVendor:
    vendor_id = Identifier(required=True)
    reviewed_by = Identifier(required=True)
    reason = String(max_length=1000)
    notify = Boolean(default=True)


@tianguis.command_handler(part_of=Vendor)
class VendorReviewHandler:
    @handle(ApproveVendor)
    def approve_vendor(self, command):
        repo = current_domain.repository_for(Vendor)
        vendor = repo.get(command.vendor_id)
        vendor.approve(reviewed_by=command.reviewed_by, notify=command.notify)
        repo.add(vendor)
        logger.info("vendor.approved", vendor_id=str(vendor.id), reviewed_by=str(command.reviewed_by))

    @handle(RejectVendor)
    def reject_vendor(self, command):
        repo = current_domain.repository_for(Vendor)
        vendor = repo.get(command.vendor_id)
        vendor.reject(reviewed_by=command.reviewed_by, reason=command.reason, notify=command.notify)
        repo.add(vendor)
        logger.info("vendor.rejected", vendor_id=str(vendor.id), reviewed_by=str(command.reviewed_by))


def list_vendors(status: str | None = None) -> list[Vendor]:
    dao = current_domain.repository_for(Vendor)._dao
    query = dao.query.filter(status=status) if status else dao.query
    return all_items(query.order_by("-registered_at"))
