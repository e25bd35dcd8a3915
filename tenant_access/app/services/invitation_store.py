"""
Invitation Store

Persistence-facing invitation operations. Callers are expected to have run
the authorization guard already; the store still puts the tenant id into
every administrative query predicate.
"""

import logging
from datetime import timedelta
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from tenant_access.app.services.clock import Clock
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.domain.credentials import generate_short_code, generate_token
from tenant_access.domain.entities import Invitation, InvitationKind, MemberRole
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.domain.policy import is_invitable_role
from tenant_access.libs.result import Result, Return

logger = logging.getLogger(__name__)


class InvitationStore:
    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        settings: InvitationSettings,
        short_code_generator: Callable[[], str] = generate_short_code,
        token_generator: Callable[[], str] = generate_token,
    ):
        self.uow = uow
        self.clock = clock
        self.settings = settings
        self._generators = {
            InvitationKind.short_code: short_code_generator,
            InvitationKind.token: token_generator,
        }

    async def create(
        self,
        tenant_id: UUID,
        role: MemberRole,
        created_by: Optional[UUID] = None,
        bound_email: Optional[str] = None,
        expiry_days: Optional[int] = None,
        kind: InvitationKind = InvitationKind.short_code,
    ) -> Result[Invitation]:
        """
        Create a pending invitation with a fresh, unique credential.

        The credential is pre-checked against existing invitations and the
        insert itself is guarded by the unique constraint on ``credential``.
        A constraint violation rolls back the current transaction, so this
        must be the first write of the unit of work.

        Returns:
            Result with the persisted Invitation, or INVALID_ROLE,
            INVALID_EXPIRY, EMAIL_MISMATCH (token without email) or
            GENERATION_EXHAUSTED
        """
        try:
            role = MemberRole(role)
        except ValueError:
            return Return.err(
                error(ErrorCode.invalid_role, f"Invalid role: {role}. Must be one of: manager, staff")
            )
        if not is_invitable_role(role):
            return Return.err(
                error(ErrorCode.invalid_role, "Invitations can only grant the manager or staff role")
            )

        if expiry_days is None:
            expiry_days = self.settings.default_expiry_days
        if not self.settings.min_expiry_days <= expiry_days <= self.settings.max_expiry_days:
            return Return.err(
                error(
                    ErrorCode.invalid_expiry,
                    f"Expiry must be between {self.settings.min_expiry_days} "
                    f"and {self.settings.max_expiry_days} days",
                )
            )

        kind = InvitationKind(kind)
        bound_email = bound_email.strip().lower() if bound_email else None
        if kind == InvitationKind.token and not bound_email:
            return Return.err(
                error(ErrorCode.email_mismatch, "Token invitations must be bound to an email")
            )

        generate = self._generators[kind]
        for attempt in range(1, self.settings.max_generation_attempts + 1):
            credential = generate()
            if await self.uow.invitations.credential_exists(credential):
                logger.info(f"Invitation credential collision on attempt {attempt}, retrying")
                continue

            now = self.clock.now()
            invitation = Invitation(
                business_id=tenant_id,
                kind=kind,
                credential=credential,
                role=role,
                bound_email=bound_email,
                created_by=created_by,
                created_at=now,
                expires_at=now + timedelta(days=expiry_days),
            )
            try:
                invitation = await self.uow.invitations.create(invitation)
            except IntegrityError:
                # Lost a race with a concurrent insert of the same credential
                await self.uow.rollback()
                logger.warning(f"Invitation credential insert conflict on attempt {attempt}")
                continue
            return Return.ok(invitation)

        logger.error(
            f"Could not generate a unique {kind.value} credential "
            f"after {self.settings.max_generation_attempts} attempts"
        )
        return Return.err(
            error(ErrorCode.generation_exhausted, "Failed to generate a unique invite code")
        )

    async def find_by_credential(self, credential: str) -> Result[Invitation]:
        invitation = await self.uow.invitations.get_by_credential(credential)
        if invitation is None:
            return Return.err(error(ErrorCode.not_found, "Invalid invite code"))
        return Return.ok(invitation)

    async def list_by_tenant(self, tenant_id: UUID) -> Result[List[Invitation]]:
        return Return.ok(await self.uow.invitations.get_by_business_id(tenant_id))

    async def mark_consumed(self, invitation_id: UUID, consumer_id: UUID) -> Result[None]:
        """Compare-and-set: succeeds only while consumed_at is still null"""
        consumed = await self.uow.invitations.mark_consumed(
            invitation_id, consumer_id, self.clock.now()
        )
        if not consumed:
            return Return.err(
                error(ErrorCode.already_used, "This invite code has already been used")
            )
        return Return.ok(None)

    async def delete(self, invitation_id: UUID, tenant_id: UUID) -> Result[None]:
        deleted = await self.uow.invitations.delete_for_business(invitation_id, tenant_id)
        if not deleted:
            return Return.err(error(ErrorCode.not_found, "Invitation not found"))
        return Return.ok(None)
