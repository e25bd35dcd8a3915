"""
Tenant Access Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class MemberRole(str, Enum):
    """Role of a member within its business"""

    owner = "owner"
    manager = "manager"
    staff = "staff"


class SubscriptionTier(str, Enum):
    """Business subscription tier"""

    free = "free"
    basic = "basic"
    premium = "premium"


class InvitationKind(str, Enum):
    """How the invitation credential is shaped and delivered"""

    short_code = "short_code"
    token = "token"


class InvitationStatus(str, Enum):
    """Derived invitation status (never stored)"""

    pending = "pending"
    consumed = "consumed"
    expired = "expired"
