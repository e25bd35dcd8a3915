"""
Use Cases

Organized by area:
- businesses/: Onboarding and team overview
- invitations/: Issuing, validating and redeeming invitations
"""

from .businesses import (
    CreateBusinessUseCase,
    ListTeamUseCase,
)
from .invitations import (
    CreateInvitationUseCase,
    ListInvitationsUseCase,
    RedeemInvitationUseCase,
    RevokeInvitationUseCase,
    ValidateInvitationUseCase,
)

__all__ = [
    # Businesses
    "CreateBusinessUseCase",
    "ListTeamUseCase",
    # Invitations
    "CreateInvitationUseCase",
    "ListInvitationsUseCase",
    "RevokeInvitationUseCase",
    "ValidateInvitationUseCase",
    "RedeemInvitationUseCase",
]
