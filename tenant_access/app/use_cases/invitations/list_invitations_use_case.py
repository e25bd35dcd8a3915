"""
List Invitations Use Case

Administrative view of every invitation of a business.
"""

from typing import Optional
from uuid import UUID

from tenant_access.app.services.authorization_guard import AuthorizationGuard
from tenant_access.app.services.clock import Clock
from tenant_access.app.services.invitation_store import InvitationStore
from tenant_access.app.services.remote import run_bounded
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.libs.result import Result, Return

from .dtos import InvitationListResponse, InvitationResponse


class ListInvitationsUseCase:
    """Lists invitations newest first. Only owners/managers of the business."""

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

    async def execute(self, actor_id: UUID, tenant_id: UUID) -> Result[InvitationListResponse]:
        return await run_bounded(
            "list_invitations",
            self._execute(actor_id, tenant_id),
            self.settings.remote_call_timeout_seconds,
        )

    async def _execute(self, actor_id: UUID, tenant_id: UUID) -> Result[InvitationListResponse]:
        async with self.uow:
            actor = await self.uow.members.get_by_id(actor_id)

            authorized = self.guard.require_inviter(actor, tenant_id)
            if authorized.is_err():
                return authorized

            listed = await self.store.list_by_tenant(tenant_id)
            if listed.is_err():
                return listed

            now = self.clock.now()
            return Return.ok(
                InvitationListResponse(
                    invitations=[
                        InvitationResponse.from_entity(
                            invitation, now, self.settings.public_base_url
                        )
                        for invitation in listed.value
                    ]
                )
            )
