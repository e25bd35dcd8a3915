from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from tenant_access.api.error import raise_for_error
from tenant_access.app.services.identity_provider import IIdentityProvider
from tenant_access.depends import get_identity_provider
from tenant_access.domain.errors import ErrorCode

router = APIRouter(prefix="/auth", tags=["Authentication"])


class SignupRequest(BaseModel):
    """
    Signup HTTP request payload

    Registers an identity only. The account joins a business later, either by
    creating one (onboarding) or by redeeming an invitation.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)


class SignupResponse(BaseModel):
    identity_id: str
    email: str


@router.post(
    "/signup", status_code=status.HTTP_201_CREATED, response_model=SignupResponse
)
async def signup(
    request: SignupRequest,
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
):
    """
    Identity Signup

    Raises:
        - 409 Conflict: AUTH_ERROR (email already registered)
        - 400 Bad Request: AUTH_ERROR (weak password)
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    result = await identity_provider.sign_up(
        request.email,
        request.password,
        {"first_name": request.first_name, "last_name": request.last_name},
    )

    if result.is_err():
        error = result.error
        if error.details.get("reason") == "email_taken":
            raise_for_error(error, {ErrorCode.auth_error.value: status.HTTP_409_CONFLICT})
        raise_for_error(error)

    return SignupResponse(
        identity_id=str(result.value.identity_id), email=result.value.email
    )


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity_id: str
    expires_at: datetime


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
):
    """
    Identity Login

    Raises:
        - 401 Unauthorized: AUTH_ERROR (invalid credentials)
    """
    result = await identity_provider.sign_in(request.email, request.password)

    if result.is_err():
        raise_for_error(
            result.error, {ErrorCode.auth_error.value: status.HTTP_401_UNAUTHORIZED}
        )

    session = result.value
    return LoginResponse(
        access_token=session.access_token,
        identity_id=str(session.identity_id),
        expires_at=session.expires_at,
    )
