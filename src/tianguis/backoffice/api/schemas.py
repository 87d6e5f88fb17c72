"""Pydantic request/response schemas for the back office API."""

from typing import Any

from pydantic import BaseModel, Field


class ApproveVendorRequest(BaseModel):
    notify: bool = True


class RejectVendorRequest(BaseModel):
    reason: str | None = Field(None, max_length=1000)
    notify: bool = True


class ApproveProductRequest(BaseModel):
    notes: str | None = None


class RejectProductRequest(BaseModel):
    reason: str


class RequestChangesRequest(BaseModel):
    notes: str


class ApproveImageRequest(BaseModel):
    notes: str | None = None


class RejectImageRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "reason": "Image is blurry and the product is not visible",
                    "category": "quality",
                    "notes": "Please upload a sharper photo on a plain background.",
                }
            ]
        }
    }

    reason: str = Field(..., max_length=500)
    category: str
    notes: str | None = None


class UpdateSettingsRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "values": {
                        "free_shipping_threshold": 1200,
                        "maintenance_mode": False,
                    }
                }
            ]
        }
    }

    values: dict[str, Any]


class StatusResponse(BaseModel):
    status: str = "ok"


def audit_entry_to_dict(entry) -> dict:
    return {
        "id": str(entry.id),
        "action": entry.action,
        "category": entry.category,
        "severity": entry.severity,
        "actor_id": str(entry.actor_id) if entry.actor_id else None,
        "actor_email": entry.actor_email,
        "actor_role": entry.actor_role,
        "ip_address": entry.ip_address,
        "user_agent": entry.user_agent,
        "resource_type": entry.resource_type,
        "resource_id": entry.resource_id,
        "details": entry.decoded_details,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def account_to_dict(account) -> dict:
    return {
        "id": str(account.id),
        "email": account.email,
        "name": account.name,
        "role": account.role,
        "vendor_id": str(account.vendor_id) if account.vendor_id else None,
        "is_active": account.is_active,
        "created_at": account.created_at.isoformat() if account.created_at else None,
        "last_login_at": account.last_login_at.isoformat() if account.last_login_at else None,
    }
