"""
Invitation Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the invitation domain.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from tenant_access.domain.entities import Invitation, InvitationKind
from tenant_access.domain.invite_links import build_invite_url, format_code_for_display


# ============================================================================
# Command DTOs
# ============================================================================


class CreateInvitationCommand(BaseModel):
    """Create invitation command"""

    role: str
    email: Optional[str] = None
    expiry_days: Optional[int] = None
    kind: InvitationKind = InvitationKind.short_code


class RedemptionCommand(BaseModel):
    """Recipient details presented together with a credential"""

    email: str
    password: str
    first_name: str
    last_name: str


# ============================================================================
# Response DTOs
# ============================================================================


class InvitationResponse(BaseModel):
    """Invitation as shown to administrators"""

    id: str
    kind: str
    credential: str
    display_code: str
    invite_url: str
    role: str
    bound_email: Optional[str]
    status: str
    expires_at: str
    created_at: str
    created_by: Optional[str]
    consumed_at: Optional[str]
    consumed_by: Optional[str]

    @classmethod
    def from_entity(
        cls, invitation: Invitation, now: datetime, base_url: str
    ) -> "InvitationResponse":
        return cls(
            id=str(invitation.id),
            kind=invitation.kind.value,
            credential=invitation.credential,
            display_code=format_code_for_display(invitation.credential),
            invite_url=build_invite_url(invitation.credential, base_url),
            role=invitation.role.value,
            bound_email=invitation.bound_email,
            status=invitation.status_at(now).value,
            expires_at=invitation.expires_at.isoformat(),
            created_at=invitation.created_at.isoformat(),
            created_by=str(invitation.created_by) if invitation.created_by else None,
            consumed_at=(
                invitation.consumed_at.isoformat() if invitation.consumed_at else None
            ),
            consumed_by=str(invitation.consumed_by) if invitation.consumed_by else None,
        )


class CreateInvitationResponse(BaseModel):
    """Response for create invitation use case"""

    invitation: InvitationResponse
    invite_message: str


class InvitationListResponse(BaseModel):
    """Response for list invitations use case"""

    invitations: List[InvitationResponse]


class RevokeInvitationResponse(BaseModel):
    """Response for revoke invitation use case"""

    status: str


class InvitationPreview(BaseModel):
    """What an invitee sees before redeeming"""

    business_id: str
    business_name: str
    role: str
    kind: str
    bound_email: Optional[str]
    expires_at: str


class RedemptionResponse(BaseModel):
    """Response for redeem invitation use case"""

    member_id: str
    tenant_id: str
    role: str
    consumption_recorded: bool = True
    access_token: Optional[str] = None
