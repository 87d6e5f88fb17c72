"""Pydantic request/response schemas for the Vendors API."""

from pydantic import BaseModel, Field


class VendorProfileFields(BaseModel):
    phone: str | None = Field(None, max_length=30)
    website: str | None = Field(None, max_length=255)
    description: str | None = None
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, min_length=2, max_length=2)


class RegisterVendorRequest(VendorProfileFields):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "business_name": "Textiles Mixtecos",
                    "contact_name": "Rosa Hernández",
                    "email": "rosa@textilesmixtecos.mx",
                    "password": "telar-2024",
                    "phone": "+52 951 555 0101",
                    "city": "Oaxaca",
                    "state": "Oaxaca",
                    "country": "MX",
                }
            ]
        }
    }

    business_name: str = Field(..., max_length=200)
    contact_name: str = Field(..., max_length=150)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=8, max_length=128)


class UpdateVendorProfileRequest(VendorProfileFields):
    business_name: str | None = Field(None, max_length=200)
    contact_name: str | None = Field(None, max_length=150)


class VendorIdResponse(BaseModel):
    vendor_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


def vendor_to_dict(vendor) -> dict:
    return {
        "id": str(vendor.id),
        "business_name": vendor.business_name,
        "contact_name": vendor.contact_name,
        "email": vendor.email,
        "phone": vendor.phone,
        "website": vendor.website,
        "description": vendor.description,
        "street": vendor.street,
        "city": vendor.city,
        "state": vendor.state,
        "postal_code": vendor.postal_code,
        "country": vendor.country,
        "status": vendor.status,
        "rejection_reason": vendor.rejection_reason,
        "registered_at": vendor.registered_at.isoformat() if vendor.registered_at else None,
        "reviewed_at": vendor.reviewed_at.isoformat() if vendor.reviewed_at else None,
    }
