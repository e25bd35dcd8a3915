"""
Validate Invitation Use Case

Public preview of an invitation before the invitee fills in their details.
"""

from typing import Optional

from tenant_access.app.services.clock import Clock
from tenant_access.app.services.invitation_store import InvitationStore
from tenant_access.app.services.invitation_validator import InvitationValidator
from tenant_access.app.services.remote import run_bounded
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.libs.result import Result, Return

from .dtos import InvitationPreview


class ValidateInvitationUseCase:
    """Read-only: may be called any number of times without consuming anything."""

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        settings: InvitationSettings,
        validator: Optional[InvitationValidator] = None,
    ):
        self.uow = uow
        self.clock = clock
        self.settings = settings
        self.validator = validator or InvitationValidator(
            InvitationStore(uow, clock, settings), clock
        )

    async def execute(self, credential: str) -> Result[InvitationPreview]:
        return await run_bounded(
            "validate_invitation",
            self._execute(credential),
            self.settings.remote_call_timeout_seconds,
        )

    async def _execute(self, credential: str) -> Result[InvitationPreview]:
        async with self.uow:
            validated = await self.validator.validate(credential)
            if validated.is_err():
                return validated
            invitation = validated.value

            business = await self.uow.businesses.get_by_id(invitation.business_id)
            if business is None:
                return Return.err(error(ErrorCode.not_found, "Invalid invite code"))

            return Return.ok(
                InvitationPreview(
                    business_id=str(business.id),
                    business_name=business.name,
                    role=invitation.role.value,
                    kind=invitation.kind.value,
                    bound_email=invitation.bound_email,
                    expires_at=invitation.expires_at.isoformat(),
                )
            )
