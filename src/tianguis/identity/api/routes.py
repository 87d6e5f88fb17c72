"""FastAPI endpoints for accounts and sign-in."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request
from protean.utils.globals import current_domain

from tianguis.backoffice.audit import AuditCategory, AuditSeverity, RecordAuditEntry
from tianguis.identity.access import current_identity
from tianguis.identity.api.schemas import (
    IdentityResponse,
    LoginRequest,
    RegisterCustomerRequest,
    TokenResponse,
    UserIdResponse,
)
from tianguis.identity.credentials import AuthenticatedIdentity, AuthenticationError, authenticate
from tianguis.identity.registration import RegisterCustomer
from tianguis.identity.tokens import issue_token

router = APIRouter(prefix="/auth", tags=["auth"])


def _audit_login(request: Request, action: str, severity: AuditSeverity, email: str, identity=None) -> None:
    current_domain.process(
        RecordAuditEntry(
            action=action,
            category=AuditCategory.AUTH.value,
            severity=severity.value,
            actor_id=identity.user_id if identity else None,
            actor_email=email,
            actor_role=identity.role if identity else None,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            resource_type="user",
            resource_id=identity.user_id if identity else None,
        ),
        asynchronous=False,
    )


@router.post("/register", status_code=201, response_model=UserIdResponse)
async def register(body: RegisterCustomerRequest) -> UserIdResponse:
    command = RegisterCustomer(email=body.email, name=body.name, password=body.password)
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, request: Request) -> TokenResponse:
    credentials = body.credentials
    try:
        identity = authenticate(credentials)
    except AuthenticationError as exc:
        _audit_login(request, "auth.login_failed", AuditSeverity.WARNING, credentials.email)
        raise HTTPException(status_code=401, detail=str(exc)) from None

    _audit_login(request, "auth.login", AuditSeverity.INFO, identity.email, identity)
    return TokenResponse(access_token=issue_token(identity), role=identity.role, vendor_id=identity.vendor_id)


@router.get("/me", response_model=IdentityResponse)
async def me(identity: AuthenticatedIdentity = Depends(current_identity)) -> IdentityResponse:
    return IdentityResponse(**asdict(identity))
