"""Login credentials as a tagged union resolved to one authenticated identity.

The login form has customer, vendor and admin tabs. Each tab posts a
credential of its own ``kind``; ``authenticate`` accepts any of them and
returns the same ``AuthenticatedIdentity`` regardless of which kind was used.
"""

from dataclasses import dataclass
from typing import Annotated, Literal

import structlog
from pydantic import BaseModel, Field
from protean.utils.globals import current_domain

from tianguis.identity.account import ADMIN_ROLES, Role, UserAccount, find_account_by_email

logger = structlog.get_logger(__name__)


class CustomerCredentials(BaseModel):
    kind: Literal["customer"] = "customer"
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class VendorCredentials(BaseModel):
    kind: Literal["vendor"] = "vendor"
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class AdminCredentials(BaseModel):
    kind: Literal["admin"] = "admin"
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


Credentials = Annotated[
    CustomerCredentials | VendorCredentials | AdminCredentials,
    Field(discriminator="kind"),
]

_ROLES_BY_KIND = {
    "customer": frozenset({Role.CUSTOMER.value}),
    "vendor": frozenset({Role.VENDOR.value}),
    "admin": ADMIN_ROLES,
}


class AuthenticationError(Exception):
    """Credentials did not resolve to an active account of the requested kind."""


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: str
    email: str
    name: str
    role: str
    vendor_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @classmethod
    def from_account(cls, account: UserAccount) -> "AuthenticatedIdentity":
        return cls(
            user_id=str(account.id),
            email=account.email,
            name=account.name,
            role=account.role,
            vendor_id=str(account.vendor_id) if account.vendor_id else None,
        )


def authenticate(credentials: CustomerCredentials | VendorCredentials | AdminCredentials) -> AuthenticatedIdentity:
    account = find_account_by_email(credentials.email)

    # Same error for unknown email, wrong tab and wrong password
    if (
        account is None
        or not account.is_active
        or account.role not in _ROLES_BY_KIND[credentials.kind]
        or not account.verify_password(credentials.password)
    ):
        logger.info("login.rejected", kind=credentials.kind)
        raise AuthenticationError("Invalid credentials")

    account.record_login()
    current_domain.repository_for(UserAccount).add(account)

    logger.info("login.succeeded", user_id=str(account.id), role=account.role)
    return AuthenticatedIdentity.from_account(account)
