"""
Revoke Invitation Use Case

Handles deleting invitations of a business.
"""

from typing import Optional
from uuid import UUID

from tenant_access.app.services.authorization_guard import AuthorizationGuard
from tenant_access.app.services.clock import Clock
from tenant_access.app.services.invitation_store import InvitationStore
from tenant_access.app.services.remote import run_bounded
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.domain.entities import AuditEvent
from tenant_access.libs.result import Result, Return

from .dtos import RevokeInvitationResponse


class RevokeInvitationUseCase:
    """
    Use case for revoking invitations.

    Business Rules:
    - Only owners/managers of the business can revoke
    - The delete is scoped to the business: an id from another business
      answers NOT_FOUND exactly like an unknown id
    - Creates audit event
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        settings: InvitationSettings,
        store: Optional[InvitationStore] = None,
        guard: Optional[AuthorizationGuard] = None,
    ):
        self.uow = uow
        self.clock = clock
        self.settings = settings
        self.store = store or InvitationStore(uow, clock, settings)
        self.guard = guard or AuthorizationGuard()

    async def execute(
        self, actor_id: UUID, tenant_id: UUID, invitation_id: UUID
    ) -> Result[RevokeInvitationResponse]:
        """
        Execute revoke invitation use case.

        Args:
            actor_id: Member ID of the person revoking the invite
            tenant_id: Business ID the invitation must belong to
            invitation_id: ID of the invitation to revoke

        Returns:
            Result with RevokeInvitationResponse DTO, or Error
        """
        return await run_bounded(
            "revoke_invitation",
            self._execute(actor_id, tenant_id, invitation_id),
            self.settings.remote_call_timeout_seconds,
        )

    async def _execute(
        self, actor_id: UUID, tenant_id: UUID, invitation_id: UUID
    ) -> Result[RevokeInvitationResponse]:
        async with self.uow:
            actor = await self.uow.members.get_by_id(actor_id)

            authorized = self.guard.require_inviter(actor, tenant_id)
            if authorized.is_err():
                return authorized

            deleted = await self.store.delete(invitation_id, tenant_id)
            if deleted.is_err():
                return deleted

            audit = AuditEvent(
                business_id=tenant_id,
                member_id=actor_id,
                action="invitation_revoked",
                event_metadata={"invitation_id": str(invitation_id)},
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            return Return.ok(RevokeInvitationResponse(status="revoked"))
