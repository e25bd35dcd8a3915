"""
Business Use Case DTOs (Data Transfer Objects)
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from tenant_access.app.use_cases.invitations.dtos import InvitationResponse
from tenant_access.domain.entities import SubscriptionTier


class CreateBusinessCommand(BaseModel):
    """Onboarding command - the caller becomes the first owner"""

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Dict[str, Any]] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.free
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class BusinessResponse(BaseModel):
    """Response for create business use case"""

    id: str
    name: str
    subscription_tier: str
    owner_id: str
    role: str


class TeamMember(BaseModel):
    """Member row in the team view"""

    id: str
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    role: str
    is_active: bool
    created_at: str


class TeamResponse(BaseModel):
    """Members plus pending invitations of a business"""

    members: List[TeamMember]
    pending_invitations: List[InvitationResponse]
