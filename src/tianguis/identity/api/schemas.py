"""Pydantic request/response schemas for the Identity API."""

from pydantic import BaseModel, Field

from tianguis.identity.credentials import Credentials


class RegisterCustomerRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "ana@example.mx",
                    "name": "Ana López",
                    "password": "s3cret-pass",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    name: str = Field(..., max_length=150)
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    credentials: Credentials


class UserIdResponse(BaseModel):
    user_id: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    vendor_id: str | None = None


class IdentityResponse(BaseModel):
    user_id: str
    email: str
    name: str
    role: str
    vendor_id: str | None = None
