"""Signed access tokens (JWT, HS256)."""

import os
from datetime import UTC, datetime, timedelta

import jwt

from tianguis.identity.credentials import AuthenticatedIdentity
from tianguis.utils.logging import current_environment

ALGORITHM = "HS256"
_DEVELOPMENT_SECRET = "tianguis-dev-jwt-secret-change-me"


def signing_secret() -> str:
    secret = os.getenv("TIANGUIS_JWT_SECRET")
    if secret:
        return secret
    if current_environment() == "production":
        raise RuntimeError("TIANGUIS_JWT_SECRET must be set in production")
    return _DEVELOPMENT_SECRET


def _ttl() -> timedelta:
    return timedelta(minutes=int(os.getenv("TIANGUIS_TOKEN_TTL_MINUTES", "120")))


class InvalidToken(Exception):
    pass


def issue_token(identity: AuthenticatedIdentity) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": identity.user_id,
        "email": identity.email,
        "name": identity.name,
        "role": identity.role,
        "vendor_id": identity.vendor_id,
        "iat": now,
        "exp": now + _ttl(),
    }
    return jwt.encode(payload, signing_secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> AuthenticatedIdentity:
    try:
        payload = jwt.decode(token, signing_secret(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token expired") from None
    except jwt.InvalidTokenError:
        raise InvalidToken("Invalid token") from None

    return AuthenticatedIdentity(
        user_id=payload["sub"],
        email=payload["email"],
        name=payload.get("name", ""),
        role=payload["role"],
        vendor_id=payload.get("vendor_id"),
    )
