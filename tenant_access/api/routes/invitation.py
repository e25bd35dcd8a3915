from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field, model_validator

from tenant_access.api.error import raise_for_error
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.app.use_cases.invitations import (
    InvitationPreview,
    RedeemInvitationUseCase,
    RedemptionCommand,
    RedemptionResponse,
    ValidateInvitationUseCase,
)
from tenant_access.depends import ServiceContainer, get_container, get_unit_of_work
from tenant_access.domain.invite_links import (
    extract_invite_code_from_url,
    normalize_credential,
)

router = APIRouter(prefix="/invitations", tags=["Invitations"])


class CredentialRequest(BaseModel):
    """
    Invitation credential, typed in or taken from a shared link
    (``https://<host>/?invite=ABCD1234``)
    """

    credential: Optional[str] = Field(None, description="Short code or token")
    invite_url: Optional[str] = Field(None, description="Shareable invite link")

    @model_validator(mode="after")
    def require_one(self):
        if not self.credential and not self.invite_url:
            raise ValueError("Either credential or invite_url is required")
        return self

    def resolved_credential(self) -> str:
        if self.credential:
            return normalize_credential(self.credential)
        return extract_invite_code_from_url(self.invite_url) or ""


class RedeemInvitationRequest(CredentialRequest):
    email: EmailStr = Field(..., description="Recipient email address")
    password: str = Field(..., min_length=8, description="Password (min 8 chars)")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


@router.post(
    "/validate", status_code=status.HTTP_200_OK, response_model=InvitationPreview
)
async def validate_invitation(
    request: CredentialRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    container: ServiceContainer = Depends(get_container),
):
    """
    Validate Invitation - read-only preview

    Raises:
        - 400 Bad Request: MALFORMED_CREDENTIAL
        - 404 Not Found: NOT_FOUND
        - 409 Conflict: ALREADY_USED
        - 410 Gone: EXPIRED
    """
    use_case = ValidateInvitationUseCase(uow, container.clock, container.settings)
    result = await use_case.execute(request.resolved_credential())

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/redeem", status_code=status.HTTP_201_CREATED, response_model=RedemptionResponse
)
async def redeem_invitation(
    request: RedeemInvitationRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    container: ServiceContainer = Depends(get_container),
):
    """
    Redeem Invitation - creates the account and the membership

    Raises:
        - 400 Bad Request: MALFORMED_CREDENTIAL, AUTH_ERROR
        - 403 Forbidden: EMAIL_MISMATCH
        - 404 Not Found: NOT_FOUND
        - 409 Conflict: ALREADY_USED, ALREADY_REGISTERED
        - 410 Gone: EXPIRED
        - 500 Internal Server Error: PROFILE_PROVISIONING_FAILED (retry is safe)
        - 503 Service Unavailable: TRANSIENT_ERROR
    """
    use_case = RedeemInvitationUseCase(
        uow, container.identity_provider, container.clock, container.settings
    )
    result = await use_case.execute(
        request.resolved_credential(),
        RedemptionCommand(
            email=request.email,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
        ),
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
