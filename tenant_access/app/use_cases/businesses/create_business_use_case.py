"""
Create Business Use Case

Onboarding: creates a business and makes the caller its owner.
"""

from tenant_access.app.services.clock import Clock
from tenant_access.app.services.identity_provider import IdentityInfo
from tenant_access.app.services.remote import run_bounded
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.domain.entities import AuditEvent, Business, Member, MemberRole
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.libs.result import Result, Return

from .dtos import BusinessResponse, CreateBusinessCommand


class CreateBusinessUseCase:
    """
    Use case for creating a business at onboarding.

    Business Rules:
    - The caller must not belong to a business yet
    - The caller's email must not be used by another member
    - Business and owner membership are committed together
    - This is the only path that produces an owner
    """

    def __init__(self, uow: UnitOfWork, clock: Clock, settings: InvitationSettings):
        self.uow = uow
        self.clock = clock
        self.settings = settings

    async def execute(
        self, caller: IdentityInfo, command: CreateBusinessCommand
    ) -> Result[BusinessResponse]:
        return await run_bounded(
            "create_business",
            self._execute(caller, command),
            self.settings.remote_call_timeout_seconds,
        )

    async def _execute(
        self, caller: IdentityInfo, command: CreateBusinessCommand
    ) -> Result[BusinessResponse]:
        email = caller.email.strip().lower()
        name = command.name.strip()

        if len(name) < 2:
            return Return.err(
                error(
                    ErrorCode.invalid_business_name,
                    "Business name must be at least 2 characters",
                )
            )

        async with self.uow:
            member = await self.uow.members.get_by_id(caller.identity_id)
            if member is not None and member.business_id is not None:
                return Return.err(
                    error(ErrorCode.already_registered, "You already belong to a business")
                )

            by_email = await self.uow.members.get_by_email(email)
            if by_email is not None and by_email.id != caller.identity_id:
                return Return.err(
                    error(ErrorCode.already_registered, "An account with this email already exists")
                )

            business = Business(
                name=name,
                email=command.email,
                phone=command.phone,
                address=command.address,
                subscription_tier=command.subscription_tier,
            )
            business = await self.uow.businesses.create(business)

            if member is None:
                member = Member(
                    id=caller.identity_id,
                    email=email,
                    business_id=business.id,
                    role=MemberRole.owner,
                    first_name=command.first_name,
                    last_name=command.last_name,
                    is_active=True,
                )
                member = await self.uow.members.create(member)
            else:
                member.business_id = business.id
                member.role = MemberRole.owner
                member.first_name = command.first_name or member.first_name
                member.last_name = command.last_name or member.last_name
                member.is_active = True
                member.updated_at = self.clock.now()
                member = await self.uow.members.update(member)

            audit = AuditEvent(
                business_id=business.id,
                member_id=member.id,
                action="business_created",
                event_metadata={"name": business.name, "owner_email": email},
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            return Return.ok(
                BusinessResponse(
                    id=str(business.id),
                    name=business.name,
                    subscription_tier=business.subscription_tier.value,
                    owner_id=str(member.id),
                    role=MemberRole.owner.value,
                )
            )
