"""
Authorization Guard

Capability checks run before any mutating or administrative invitation
operation. Answers never reveal whether something exists in another tenant.
"""

from typing import Optional
from uuid import UUID

from tenant_access.domain.entities import Member, MemberRole
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.domain.policy import can_invite, can_issue_role, can_manage_team
from tenant_access.libs.result import Result, Return


class AuthorizationGuard:
    def require_inviter(
        self, acting_member: Optional[Member], tenant_id: UUID
    ) -> Result[None]:
        """Pass iff the member belongs to tenant_id and may invite"""
        if not self._is_active_in(acting_member, tenant_id):
            return Return.err(
                error(ErrorCode.unauthorized, "You cannot manage invitations for this business")
            )
        if not can_invite(acting_member.role):
            return Return.err(
                error(ErrorCode.unauthorized, "Only owners and managers can manage invitations")
            )
        return Return.ok(None)

    def require_team_manager(
        self, acting_member: Optional[Member], tenant_id: UUID
    ) -> Result[None]:
        if not self._is_active_in(acting_member, tenant_id):
            return Return.err(
                error(ErrorCode.unauthorized, "You cannot view this business's team")
            )
        if not can_manage_team(acting_member.role):
            return Return.err(
                error(ErrorCode.unauthorized, "Only owners and managers can manage the team")
            )
        return Return.ok(None)

    def require_can_issue(self, acting_member: Member, role: MemberRole) -> Result[None]:
        """Owner elevation is impossible whoever asks"""
        if not can_issue_role(acting_member.role, role):
            return Return.err(
                error(
                    ErrorCode.unauthorized,
                    f"You cannot issue invitations for the {MemberRole(role).value} role",
                    role=MemberRole(role).value,
                )
            )
        return Return.ok(None)

    @staticmethod
    def _is_active_in(acting_member: Optional[Member], tenant_id: UUID) -> bool:
        return (
            acting_member is not None
            and acting_member.is_active
            and acting_member.business_id is not None
            and acting_member.business_id == tenant_id
        )
