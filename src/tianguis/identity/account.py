"""UserAccount aggregate — one login for customers, vendor staff and admins."""

from datetime import datetime
from enum import Enum

from passlib.context import CryptContext
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from tianguis.domain import tianguis
from tianguis.utils.query import all_items

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8


class Role(Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


ADMIN_ROLES = frozenset({Role.ADMIN.value, Role.SUPER_ADMIN.value})


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@tianguis.aggregate
class UserAccount:
    email: String(required=True, max_length=254, unique=True)
    name: String(required=True, max_length=150)
    password_hash: String(required=True, max_length=255)
    role: String(choices=Role, default=Role.CUSTOMER.value)
    vendor_id: Identifier()
    is_active: Boolean(default=True)
    created_at: DateTime(default=datetime.now)
    last_login_at: DateTime()

    @invariant.post
    def vendor_accounts_reference_a_vendor(self):
        if self.role == Role.VENDOR.value and not self.vendor_id:
            raise ValidationError({"vendor_id": ["Vendor accounts must reference a vendor"]})

    @classmethod
    def register(cls, email, name, password, role=Role.CUSTOMER.value, vendor_id=None):
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError({"password": [f"Password must be at least {MIN_PASSWORD_LENGTH} characters"]})

        return cls(
            email=normalize_email(email),
            name=name,
            password_hash=password_context.hash(password),
            role=role,
            vendor_id=vendor_id,
        )

    def verify_password(self, password: str) -> bool:
        return bool(password) and password_context.verify(password, self.password_hash)

    def record_login(self):
        self.last_login_at = datetime.now()


def find_account_by_email(email: str) -> UserAccount | None:
    results = current_domain.repository_for(UserAccount)._dao.query.filter(email=normalize_email(email)).all()
    return results.first


def list_accounts(role: str | None = None) -> list[UserAccount]:
    dao = current_domain.repository_for(UserAccount)._dao
    query = dao.query.filter(role=role) if role else dao.query
    return all_items(query.order_by("-created_at"))
