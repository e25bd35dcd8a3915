"""
Invitation Use Cases

Issuing, listing, revoking, validating and redeeming invitations.
"""

from .create_invitation_use_case import CreateInvitationUseCase
from .dtos import (
    CreateInvitationCommand,
    CreateInvitationResponse,
    InvitationListResponse,
    InvitationPreview,
    InvitationResponse,
    RedemptionCommand,
    RedemptionResponse,
    RevokeInvitationResponse,
)
from .list_invitations_use_case import ListInvitationsUseCase
from .redeem_invitation_use_case import RedeemInvitationUseCase
from .revoke_invitation_use_case import RevokeInvitationUseCase
from .validate_invitation_use_case import ValidateInvitationUseCase

__all__ = [
    "CreateInvitationUseCase",
    "ListInvitationsUseCase",
    "RevokeInvitationUseCase",
    "ValidateInvitationUseCase",
    "RedeemInvitationUseCase",
    "CreateInvitationCommand",
    "CreateInvitationResponse",
    "InvitationListResponse",
    "InvitationPreview",
    "InvitationResponse",
    "RedemptionCommand",
    "RedemptionResponse",
    "RevokeInvitationResponse",
]
