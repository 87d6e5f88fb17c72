"""FastAPI dependencies for role-gated routes."""

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tianguis.identity.account import ADMIN_ROLES, Role
from tianguis.identity.credentials import AuthenticatedIdentity
from tianguis.identity.tokens import InvalidToken, decode_token

_bearer = HTTPBearer(auto_error=False)


def current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> AuthenticatedIdentity:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return decode_token(credentials.credentials)
    except InvalidToken as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from None


def optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> AuthenticatedIdentity | None:
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials)
    except InvalidToken:
        return None


def require_roles(*roles: str):
    """Build a dependency that admits only identities holding one of ``roles``."""
    allowed = frozenset(roles)

    def dependency(identity: AuthenticatedIdentity = Depends(current_identity)) -> AuthenticatedIdentity:
        if identity.role not in allowed:
            raise HTTPException(status_code=403, detail="Forbidden")
        return identity

    return dependency


require_admin = require_roles(*ADMIN_ROLES)
require_vendor = require_roles(Role.VENDOR.value)
require_customer = require_roles(Role.CUSTOMER.value)
