from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from tenant_access.api.error import raise_for_error
from tenant_access.app.services.identity_provider import IdentityInfo
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.app.use_cases.businesses import (
    BusinessResponse,
    CreateBusinessCommand,
    CreateBusinessUseCase,
    ListTeamUseCase,
    TeamResponse,
)
from tenant_access.app.use_cases.invitations import (
    CreateInvitationCommand,
    CreateInvitationResponse,
    CreateInvitationUseCase,
    InvitationListResponse,
    ListInvitationsUseCase,
    RevokeInvitationResponse,
    RevokeInvitationUseCase,
)
from tenant_access.depends import (
    ServiceContainer,
    get_container,
    get_current_caller,
    get_unit_of_work,
)
from tenant_access.domain.entities import InvitationKind, SubscriptionTier

router = APIRouter(prefix="/businesses", tags=["Business"])


class CreateBusinessRequest(BaseModel):
    """
    Create business HTTP request payload

    The authenticated caller becomes the owner.
    """

    name: str = Field(..., min_length=2, max_length=255, description="Business name")
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[Dict[str, Any]] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.free
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BusinessResponse)
async def create_business(
    request: CreateBusinessRequest,
    caller: IdentityInfo = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    container: ServiceContainer = Depends(get_container),
):
    """
    Create Business (onboarding)

    Raises:
        - 401 Unauthorized: Invalid or expired token
        - 409 Conflict: ALREADY_REGISTERED
    """
    use_case = CreateBusinessUseCase(uow, container.clock, container.settings)
    result = await use_case.execute(caller, CreateBusinessCommand(**request.model_dump()))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{business_id}/team", response_model=TeamResponse)
async def list_team(
    business_id: UUID,
    caller: IdentityInfo = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    container: ServiceContainer = Depends(get_container),
):
    """
    Team Overview - members and pending invitations

    Raises:
        - 403 Forbidden: UNAUTHORIZED (not an owner/manager of this business)
    """
    use_case = ListTeamUseCase(uow, container.clock, container.settings)
    result = await use_case.execute(caller.identity_id, business_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class CreateInvitationRequest(BaseModel):
    """
    Create invitation HTTP request payload
    """

    role: str = Field(..., description="Role to grant (manager/staff)")
    email: Optional[EmailStr] = Field(
        None, description="Restrict redemption to this email"
    )
    expiry_days: Optional[int] = Field(None, description="Days until expiry (1-30)")
    kind: InvitationKind = Field(
        InvitationKind.short_code, description="short_code, or legacy email-bound token"
    )


@router.post(
    "/{business_id}/invitations",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateInvitationResponse,
)
async def create_invitation(
    business_id: UUID,
    request: CreateInvitationRequest,
    caller: IdentityInfo = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    container: ServiceContainer = Depends(get_container),
):
    """
    Create Invitation

    Raises:
        - 400 Bad Request: INVALID_ROLE, INVALID_EXPIRY
        - 403 Forbidden: UNAUTHORIZED (including any attempt to issue owner)
        - 409 Conflict: ALREADY_REGISTERED, INVITATION_ALREADY_EXISTS
        - 500 Internal Server Error: GENERATION_EXHAUSTED
    """
    use_case = CreateInvitationUseCase(uow, container.clock, container.settings)
    result = await use_case.execute(
        caller.identity_id,
        business_id,
        CreateInvitationCommand(**request.model_dump()),
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{business_id}/invitations", response_model=InvitationListResponse)
async def list_invitations(
    business_id: UUID,
    caller: IdentityInfo = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    container: ServiceContainer = Depends(get_container),
):
    """
    List Invitations - newest first

    Raises:
        - 403 Forbidden: UNAUTHORIZED
    """
    use_case = ListInvitationsUseCase(uow, container.clock, container.settings)
    result = await use_case.execute(caller.identity_id, business_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete(
    "/{business_id}/invitations/{invitation_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeInvitationResponse,
)
async def revoke_invitation(
    business_id: UUID,
    invitation_id: UUID,
    caller: IdentityInfo = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    container: ServiceContainer = Depends(get_container),
):
    """
    Revoke Invitation

    Raises:
        - 403 Forbidden: UNAUTHORIZED
        - 404 Not Found: NOT_FOUND (also for ids of other businesses)
    """
    use_case = RevokeInvitationUseCase(uow, container.clock, container.settings)
    result = await use_case.execute(caller.identity_id, business_id, invitation_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
