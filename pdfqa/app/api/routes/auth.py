"""Auth endpoints - OTP registration/login, logout and profile."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from pdfqa.app.api.auth import get_current_context, get_services
from pdfqa.app.auth.service import AuthenticatedSession
from pdfqa.app.container import Services
from pdfqa.app.db.context import RequestContext
from pdfqa.app.models.identity import IdentitySummary

router = APIRouter(prefix="/api", tags=["auth"])


# Fields are optional so missing input maps to the missing_fields error
# instead of a framework-level 422.
class CheckDuplicateRequest(BaseModel):
    """Request body for POST /api/check-duplicate."""

    email: str | None = None
    phone: str | None = None
    name: str | None = None


class CheckDuplicateResponse(BaseModel):
    """Response for POST /api/check-duplicate."""

    ok: bool = True
    emailExists: bool | None = None
    phoneExists: bool | None = None
    nameExists: bool | None = None


class RegisterStartRequest(BaseModel):
    """Request body for POST /api/register/start."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None


class RegisterVerifyRequest(RegisterStartRequest):
    """Request body for POST /api/register/verify."""

    otp: str | None = None


class LoginStartRequest(BaseModel):
    """Request body for POST /api/login/start."""

    email: str | None = None


class LoginVerifyRequest(BaseModel):
    """Request body for POST /api/login/verify."""

    email: str | None = None
    otp: str | None = None


class OtpSentResponse(BaseModel):
    """Response for the start endpoints."""

    ok: bool = True
    msg: str = "otp_sent"


class SessionResponse(BaseModel):
    """Response for the verify endpoints."""

    ok: bool = True
    user: IdentitySummary


class OkResponse(BaseModel):
    """Bare success envelope."""

    ok: bool = True


class Profile(BaseModel):
    """Identity profile for GET /api/me."""

    id: UUID
    name: str
    email: str
    phone: str
    isVerified: bool


class ProfileResponse(BaseModel):
    """Response for GET /api/me."""

    ok: bool = True
    user: Profile


def _set_session_cookie(response: Response, services: Services, session: AuthenticatedSession) -> None:
    settings = services.settings
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.credential,
        max_age=int(services.sessions.ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


@router.post("/check-duplicate", response_model=CheckDuplicateResponse, response_model_exclude_none=True)
async def check_duplicate(
    request: CheckDuplicateRequest,
    services: Annotated[Services, Depends(get_services)],
) -> CheckDuplicateResponse:
    """Report which supplied attributes are already registered."""
    found = await services.auth.check_duplicates(
        email=request.email, phone=request.phone, name=request.name
    )
    return CheckDuplicateResponse(
        emailExists=found.get("email_exists"),
        phoneExists=found.get("phone_exists"),
        nameExists=found.get("name_exists"),
    )


@router.post("/register/start", response_model=OtpSentResponse)
async def register_start(
    request: RegisterStartRequest,
    services: Annotated[Services, Depends(get_services)],
) -> OtpSentResponse:
    """Send a registration OTP to an unregistered email."""
    await services.auth.start_registration(request.name, request.email, request.phone)
    return OtpSentResponse()


@router.post("/register/verify", response_model=SessionResponse)
async def register_verify(
    request: RegisterVerifyRequest,
    response: Response,
    services: Annotated[Services, Depends(get_services)],
) -> SessionResponse:
    """Verify the registration OTP, create the identity and set the session cookie."""
    session = await services.auth.verify_registration(
        request.name, request.email, request.phone, request.otp
    )
    _set_session_cookie(response, services, session)
    return SessionResponse(user=session.identity)


@router.post("/login/start", response_model=OtpSentResponse)
async def login_start(
    request: LoginStartRequest,
    services: Annotated[Services, Depends(get_services)],
) -> OtpSentResponse:
    """Send a login OTP to a registered email."""
    await services.auth.start_login(request.email)
    return OtpSentResponse()


@router.post("/login/verify", response_model=SessionResponse)
async def login_verify(
    request: LoginVerifyRequest,
    response: Response,
    services: Annotated[Services, Depends(get_services)],
) -> SessionResponse:
    """Verify the login OTP and set the session cookie."""
    session = await services.auth.verify_login(request.email, request.otp)
    _set_session_cookie(response, services, session)
    return SessionResponse(user=session.identity)


@router.post("/logout", response_model=OkResponse)
async def logout(
    response: Response,
    services: Annotated[Services, Depends(get_services)],
) -> OkResponse:
    """Clear the session cookie.

    The credential itself stays valid until it expires (no revocation list).
    """
    response.delete_cookie(services.settings.session_cookie_name)
    return OkResponse()


@router.get("/me", response_model=ProfileResponse)
async def me(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
) -> ProfileResponse:
    """Profile of the authenticated identity."""
    identity = await services.auth.get_identity(ctx.identity_id)
    return ProfileResponse(
        user=Profile(
            id=identity.identity_id,
            name=identity.display_name,
            email=identity.email,
            phone=identity.phone,
            isVerified=identity.verified,
        )
    )
