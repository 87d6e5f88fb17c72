"""FastAPI routes for the admin back office.

Every endpoint requires an admin or super_admin token.
"""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from tianguis.backoffice.api.schemas import (
    ApproveImageRequest,
    ApproveProductRequest,
    ApproveVendorRequest,
    RejectImageRequest,
    RejectProductRequest,
    RejectVendorRequest,
    RequestChangesRequest,
    StatusResponse,
    UpdateSettingsRequest,
    account_to_dict,
    audit_entry_to_dict,
)
from tianguis.backoffice.audit import list_audit_entries
from tianguis.backoffice.settings import UpdateSettings, settings_by_category
from tianguis.catalogue.api.schemas import product_to_dict
from tianguis.catalogue.product.moderation import (
    ApproveProduct,
    ApproveProductImage,
    RejectProduct,
    RejectProductImage,
    RequestProductChanges,
    image_queue,
    moderation_queue,
)
from tianguis.catalogue.product.product import ImageStatus, ModerationStatus
from tianguis.catalogue.search import parse_positive_int
from tianguis.identity.access import require_admin
from tianguis.identity.account import list_accounts
from tianguis.identity.credentials import AuthenticatedIdentity
from tianguis.vendors.api.schemas import vendor_to_dict
from tianguis.vendors.review import ApproveVendor, RejectVendor, list_vendors

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# Vendors
# ---------------------------------------------------------------------------
@router.get("/vendors")
async def vendor_queue(status: str | None = None, _: AuthenticatedIdentity = Depends(require_admin)) -> list[dict]:
    return [vendor_to_dict(v) for v in list_vendors(status)]


@router.post("/vendors/{vendor_id}/approve", response_model=StatusResponse)
async def approve_vendor(
    vendor_id: str, body: ApproveVendorRequest, admin: AuthenticatedIdentity = Depends(require_admin)
) -> StatusResponse:
    command = ApproveVendor(vendor_id=vendor_id, reviewed_by=admin.user_id, notify=body.notify)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.post("/vendors/{vendor_id}/reject", response_model=StatusResponse)
async def reject_vendor(
    vendor_id: str, body: RejectVendorRequest, admin: AuthenticatedIdentity = Depends(require_admin)
) -> StatusResponse:
    command = RejectVendor(vendor_id=vendor_id, reviewed_by=admin.user_id, reason=body.reason, notify=body.notify)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Product moderation
# ---------------------------------------------------------------------------
@router.get("/products")
async def product_queue(
    status: str = ModerationStatus.PENDING.value, _: AuthenticatedIdentity = Depends(require_admin)
) -> list[dict]:
    return [product_to_dict(p, include_moderation=True) for p in moderation_queue(status)]


@router.post("/products/{product_id}/approve", response_model=StatusResponse)
async def approve_product(
    product_id: str, body: ApproveProductRequest, admin: AuthenticatedIdentity = Depends(require_admin)
) -> StatusResponse:
    command = ApproveProduct(product_id=product_id, moderator_id=admin.user_id, notes=body.notes)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.post("/products/{product_id}/reject", response_model=StatusResponse)
async def reject_product(
    product_id: str, body: RejectProductRequest, admin: AuthenticatedIdentity = Depends(require_admin)
) -> StatusResponse:
    command = RejectProduct(product_id=product_id, moderator_id=admin.user_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.post("/products/{product_id}/request-changes", response_model=StatusResponse)
async def request_product_changes(
    product_id: str, body: RequestChangesRequest, admin: AuthenticatedIdentity = Depends(require_admin)
) -> StatusResponse:
    command = RequestProductChanges(product_id=product_id, moderator_id=admin.user_id, notes=body.notes)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Image moderation
# ---------------------------------------------------------------------------
@router.get("/images")
async def pending_images(
    status: str = ImageStatus.PENDING.value, _: AuthenticatedIdentity = Depends(require_admin)
) -> list[dict]:
    return [
        {**entry, "created_at": entry["created_at"].isoformat() if entry["created_at"] else None}
        for entry in image_queue(status)
    ]


@router.post("/images/{product_id}/{image_id}/approve", response_model=StatusResponse)
async def approve_image(
    product_id: str,
    image_id: str,
    body: ApproveImageRequest,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> StatusResponse:
    command = ApproveProductImage(
        product_id=product_id, image_id=image_id, moderator_id=admin.user_id, notes=body.notes
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.post("/images/{product_id}/{image_id}/reject", response_model=StatusResponse)
async def reject_image(
    product_id: str,
    image_id: str,
    body: RejectImageRequest,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> StatusResponse:
    command = RejectProductImage(
        product_id=product_id,
        image_id=image_id,
        moderator_id=admin.user_id,
        reason=body.reason,
        category=body.category,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
@router.get("/settings")
async def get_platform_settings(_: AuthenticatedIdentity = Depends(require_admin)) -> dict:
    return settings_by_category()


@router.put("/settings")
async def update_platform_settings(
    body: UpdateSettingsRequest, admin: AuthenticatedIdentity = Depends(require_admin)
) -> dict:
    command = UpdateSettings(values=json.dumps(body.values), updated_by=admin.user_id)
    changed = current_domain.process(command, asynchronous=False)
    return {"updated": changed, "settings": settings_by_category()}


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------
@router.get("/audit-logs")
async def audit_logs(
    category: str | None = None,
    action: str | None = None,
    severity: str | None = None,
    resource_type: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    _: AuthenticatedIdentity = Depends(require_admin),
) -> dict:
    result = list_audit_entries(
        category=category,
        action=action,
        severity=severity,
        resource_type=resource_type,
        page=parse_positive_int(page, 1),
        limit=min(parse_positive_int(limit, 50), 200),
    )
    return {
        "entries": [audit_entry_to_dict(e) for e in result.entries],
        "pagination": {
            "page": result.page,
            "limit": result.limit,
            "total_count": result.total_count,
            "total_pages": result.total_pages,
        },
    }


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@router.get("/users")
async def users(role: str | None = None, _: AuthenticatedIdentity = Depends(require_admin)) -> list[dict]:
    return [account_to_dict(a) for a in list_accounts(role)]
