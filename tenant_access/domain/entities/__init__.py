"""
Tenant Access Domain Entities

All domain entities organized by model.
"""

from .enums import (
    InvitationKind,
    InvitationStatus,
    MemberRole,
    SubscriptionTier,
)

from .business import Business
from .member import Member
from .invitation import Invitation
from .identity import Identity
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "InvitationKind",
    "InvitationStatus",
    "MemberRole",
    "SubscriptionTier",
    # Entities
    "Business",
    "Member",
    "Invitation",
    "Identity",
    "AuditEvent",
]
