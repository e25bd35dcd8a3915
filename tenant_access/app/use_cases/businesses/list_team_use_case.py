"""
List Team Use Case

Members and pending invitations of a business, for owners and managers.
"""

from typing import Optional
from uuid import UUID

from tenant_access.app.services.authorization_guard import AuthorizationGuard
from tenant_access.app.services.clock import Clock
from tenant_access.app.services.remote import run_bounded
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.app.use_cases.invitations.dtos import InvitationResponse
from tenant_access.libs.result import Result, Return

from .dtos import TeamMember, TeamResponse


class ListTeamUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        settings: InvitationSettings,
        guard: Optional[AuthorizationGuard] = None,
    ):
        self.uow = uow
        self.clock = clock
        self.settings = settings
        self.guard = guard or AuthorizationGuard()

    async def execute(self, actor_id: UUID, tenant_id: UUID) -> Result[TeamResponse]:
        return await run_bounded(
            "list_team",
            self._execute(actor_id, tenant_id),
            self.settings.remote_call_timeout_seconds,
        )

    async def _execute(self, actor_id: UUID, tenant_id: UUID) -> Result[TeamResponse]:
        async with self.uow:
            actor = await self.uow.members.get_by_id(actor_id)

            authorized = self.guard.require_team_manager(actor, tenant_id)
            if authorized.is_err():
                return authorized

            members = await self.uow.members.get_by_business_id(tenant_id)
            invitations = await self.uow.invitations.get_by_business_id(tenant_id)

            now = self.clock.now()
            return Return.ok(
                TeamResponse(
                    members=[
                        TeamMember(
                            id=str(m.id),
                            email=m.email,
                            first_name=m.first_name,
                            last_name=m.last_name,
                            role=m.role.value,
                            is_active=m.is_active,
                            created_at=m.created_at.isoformat(),
                        )
                        for m in members
                    ],
                    pending_invitations=[
                        InvitationResponse.from_entity(
                            invitation, now, self.settings.public_base_url
                        )
                        for invitation in invitations
                        if invitation.is_usable_at(now)
                    ],
                )
            )
