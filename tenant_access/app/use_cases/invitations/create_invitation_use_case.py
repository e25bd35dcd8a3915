"""
Create Invitation Use Case

Handles issuing invitations to join a business with a given role.
"""

from typing import Optional
from uuid import UUID

from tenant_access.app.services.authorization_guard import AuthorizationGuard
from tenant_access.app.services.clock import Clock
from tenant_access.app.services.invitation_store import InvitationStore
from tenant_access.app.services.remote import run_bounded
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.domain.entities import AuditEvent, MemberRole
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.domain.invite_links import build_invite_message
from tenant_access.libs.result import Result, Return

from .dtos import CreateInvitationCommand, CreateInvitationResponse, InvitationResponse


class CreateInvitationUseCase:
    """
    Use case for issuing invitations.

    Business Rules:
    - Only active owners/managers of the business can invite
    - No invitation can grant the owner role, whoever asks
    - Expiry between 1 and 30 days (7 by default)
    - Email-bound invitations are refused when the email already has an
      account or a pending invitation in this business
    - Creates audit event for compliance tracking
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
        self, actor_id: UUID, tenant_id: UUID, command: CreateInvitationCommand
    ) -> Result[CreateInvitationResponse]:
        """
        Execute create invitation use case.

        Args:
            actor_id: Member ID of the inviter
            tenant_id: Target business ID
            command: Role, optional bound email, expiry and kind

        Returns:
            Result with CreateInvitationResponse DTO, or Error
        """
        return await run_bounded(
            "create_invitation",
            self._execute(actor_id, tenant_id, command),
            self.settings.remote_call_timeout_seconds,
        )

    async def _execute(
        self, actor_id: UUID, tenant_id: UUID, command: CreateInvitationCommand
    ) -> Result[CreateInvitationResponse]:
        async with self.uow:
            try:
                role = MemberRole(command.role)
            except ValueError:
                return Return.err(
                    error(
                        ErrorCode.invalid_role,
                        f"Invalid role: {command.role}. Must be one of: manager, staff",
                    )
                )

            actor = await self.uow.members.get_by_id(actor_id)

            authorized = self.guard.require_inviter(actor, tenant_id)
            if authorized.is_err():
                return authorized

            # Checked before anything is written
            issuable = self.guard.require_can_issue(actor, role)
            if issuable.is_err():
                return issuable

            bound_email = command.email.strip().lower() if command.email else None
            if bound_email:
                if await self.uow.members.get_by_email(bound_email):
                    return Return.err(
                        error(
                            ErrorCode.already_registered,
                            "A user with this email already exists",
                        )
                    )
                pending = await self.uow.invitations.get_pending_by_business_and_email(
                    tenant_id, bound_email, self.clock.now()
                )
                if pending:
                    return Return.err(
                        error(
                            ErrorCode.invitation_already_exists,
                            "An invitation has already been sent to this email",
                        )
                    )

            business = await self.uow.businesses.get_by_id(tenant_id)
            if business is None:
                return Return.err(error(ErrorCode.not_found, "Business not found"))

            # Read before the insert: a credential conflict rolls back and
            # expires loaded instances
            business_name = business.name
            sender_name = actor.display_name

            created = await self.store.create(
                tenant_id,
                role,
                created_by=actor_id,
                bound_email=bound_email,
                expiry_days=command.expiry_days,
                kind=command.kind,
            )
            if created.is_err():
                return created
            invitation = created.value

            audit = AuditEvent(
                business_id=tenant_id,
                member_id=actor_id,
                action="invitation_created",
                event_metadata={
                    "invitation_id": str(invitation.id),
                    "kind": invitation.kind.value,
                    "role": role.value,
                    "bound_email": bound_email,
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            expiry_days = command.expiry_days or self.settings.default_expiry_days
            return Return.ok(
                CreateInvitationResponse(
                    invitation=InvitationResponse.from_entity(
                        invitation, self.clock.now(), self.settings.public_base_url
                    ),
                    invite_message=build_invite_message(
                        invitation.credential,
                        business_name,
                        role,
                        self.settings.public_base_url,
                        sender_name=sender_name,
                        expiry_days=expiry_days,
                    ),
                )
            )
