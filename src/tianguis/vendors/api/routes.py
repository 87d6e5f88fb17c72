"""FastAPI endpoints for vendor onboarding and self-service profile."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from tianguis.identity.access import require_vendor
from tianguis.identity.credentials import AuthenticatedIdentity
from tianguis.vendors.api.schemas import (
    RegisterVendorRequest,
    StatusResponse,
    UpdateVendorProfileRequest,
    VendorIdResponse,
    vendor_to_dict,
)
from tianguis.vendors.registration import RegisterVendor, UpdateVendorProfile
from tianguis.vendors.vendor import Vendor

router = APIRouter(prefix="/vendors", tags=["vendors"])


@router.post("/register", status_code=201, response_model=VendorIdResponse)
async def register_vendor(body: RegisterVendorRequest) -> VendorIdResponse:
    result = current_domain.process(RegisterVendor(**body.model_dump(exclude_none=True)), asynchronous=False)
    return VendorIdResponse(vendor_id=result)


@router.get("/me")
async def my_vendor(identity: AuthenticatedIdentity = Depends(require_vendor)) -> dict:
    return vendor_to_dict(current_domain.repository_for(Vendor).get(identity.vendor_id))


@router.put("/me", response_model=StatusResponse)
async def update_my_vendor(
    body: UpdateVendorProfileRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    command = UpdateVendorProfile(vendor_id=identity.vendor_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
