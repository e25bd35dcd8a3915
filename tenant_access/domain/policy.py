"""
Role capability table.

Every authorization decision about members goes through this module. Role
logic must not be re-derived at call sites.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet

from .entities.enums import MemberRole


@dataclass(frozen=True)
class Capabilities:
    invite: bool
    manage_team: bool
    issuable_roles: FrozenSet[MemberRole]


_INVITABLE_ROLES = frozenset({MemberRole.manager, MemberRole.staff})

CAPABILITY_TABLE: Dict[MemberRole, Capabilities] = {
    MemberRole.owner: Capabilities(
        invite=True, manage_team=True, issuable_roles=_INVITABLE_ROLES
    ),
    MemberRole.manager: Capabilities(
        invite=True, manage_team=True, issuable_roles=_INVITABLE_ROLES
    ),
    MemberRole.staff: Capabilities(
        invite=False, manage_team=False, issuable_roles=frozenset()
    ),
}


def capabilities_for(role: MemberRole) -> Capabilities:
    return CAPABILITY_TABLE[MemberRole(role)]


def can_invite(role: MemberRole) -> bool:
    return capabilities_for(role).invite


def can_manage_team(role: MemberRole) -> bool:
    return capabilities_for(role).manage_team


def can_issue_role(actor_role: MemberRole, target_role: MemberRole) -> bool:
    return MemberRole(target_role) in capabilities_for(actor_role).issuable_roles


def is_invitable_role(role: MemberRole) -> bool:
    """Roles an invitation may carry at all, whoever issues it"""
    return MemberRole(role) in _INVITABLE_ROLES
