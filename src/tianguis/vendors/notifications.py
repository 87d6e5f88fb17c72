"""Email vendors about the outcome of their application."""

import structlog
from protean import handle

from tianguis.domain import tianguis
from tianguis.notifications import get_email_channel
from tianguis.vendors.vendor import Vendor, VendorApproved, VendorRejected

logger = structlog.get_logger(__name__)


def _deliver(to: str, subject: str, body: str, vendor_id) -> None:
    result = get_email_channel().send(to=to, subject=subject, body=body)
    if result["status"] != "sent":
        # Review outcome stands even when the email bounces
        logger.warning("vendor.notification_failed", vendor_id=str(vendor_id), error=result.get("error"))


@tianguis.event_handler(part_of=Vendor)
class VendorDecisionNotifier:
    @handle(VendorApproved)
    def on_vendor_approved(self, event: VendorApproved) -> None:
        if not event.notify:
            return
        greeting = f"Hola {event.contact_name}," if event.contact_name else "Hola,"
        _deliver(
            to=event.email,
            subject=f"{event.business_name} has been approved",
            body=(
                f"{greeting}\n\n"
                f"Your vendor application for {event.business_name} was approved. "
                "You can now list products in your vendor dashboard."
            ),
            vendor_id=event.vendor_id,
        )

    @handle(VendorRejected)
    def on_vendor_rejected(self, event: VendorRejected) -> None:
        if not event.notify:
            return
        greeting = f"Hola {event.contact_name}," if event.contact_name else "Hola,"
        body = f"{greeting}\n\nYour vendor application for {event.business_name} was not approved."
        if event.reason:
            body += f"\n\nReason: {event.reason}"
        _deliver(
            to=event.email,
            subject=f"Update on your application for {event.business_name}",
            body=body,
            vendor_id=event.vendor_id,
        )
