"""
Redeem Invitation Use Case (Access Provisioner)

Turns a valid invitation plus recipient details into an identity and a
membership of the inviting business.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from tenant_access.app.services.clock import Clock
from tenant_access.app.services.identity_provider import IdentityInfo, IIdentityProvider
from tenant_access.app.services.invitation_store import InvitationStore
from tenant_access.app.services.invitation_validator import InvitationValidator
from tenant_access.app.services.remote import is_transient, run_bounded
from tenant_access.app.services.settings import InvitationSettings
from tenant_access.app.services.unit_of_work import UnitOfWork
from tenant_access.domain.entities import AuditEvent, Member, MemberRole
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.domain.invite_links import normalize_credential
from tenant_access.libs.result import Result, Return

from .dtos import RedemptionCommand, RedemptionResponse

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "email_taken"


class RedeemInvitationUseCase:
    """
    Use case for redeeming an invitation.

    Business Rules:
    1. The credential must pass the validator (format, existence, unused,
       unexpired)
    2. A bound email must match the recipient email case-insensitively
    3. The recipient email must not belong to a member already
    4. The identity is created at the identity provider. If it already exists
       without a membership (left by PROFILE_PROVISIONING_FAILED) it is
       recovered by signing in with the same password
    5. The member is upserted by identity id, so a retry repairs an orphaned
       identity instead of duplicating it
    6. The invitation is consumed by a conditional update in the same
       transaction. Losing that race rolls the membership back and answers
       ALREADY_USED. A lock or lost connection rolls back too and answers
       TRANSIENT_ERROR. Any other failure of this bookkeeping is logged and
       the membership is kept
    7. Returns the member id and tenant id

    Steps 5-7 are shielded from caller cancellation, so they may commit after
    the caller got TRANSIENT_ERROR. Retrying with the same email and password
    then answers with the existing membership instead of ALREADY_USED.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        identity_provider: IIdentityProvider,
        clock: Clock,
        settings: InvitationSettings,
        store: Optional[InvitationStore] = None,
        validator: Optional[InvitationValidator] = None,
    ):
        self.uow = uow
        self.identity_provider = identity_provider
        self.clock = clock
        self.settings = settings
        self.store = store or InvitationStore(uow, clock, settings)
        self.validator = validator or InvitationValidator(self.store, clock)

    async def execute(
        self, credential: str, command: RedemptionCommand
    ) -> Result[RedemptionResponse]:
        """
        Execute redeem invitation use case.

        Args:
            credential: Short code or token, as typed or extracted from a link
            command: Recipient email, password and name

        Returns:
            Result with RedemptionResponse DTO, or Error
        """
        timeout = self.settings.remote_call_timeout_seconds
        email = command.email.strip().lower()

        logger.info("redeem step=validate")
        checked = await run_bounded(
            "validate_invitation", self._check_invitation(credential, email), timeout
        )
        if checked.is_err():
            logger.info(f"redeem rejected code={checked.error.code}")
            return checked
        invitation_id, tenant_id, role, granted_to = checked.value

        if granted_to is not None:
            return await self._confirm_existing_grant(
                invitation_id, tenant_id, role, granted_to, email, command.password
            )

        logger.info(f"redeem step=create_identity invitation={invitation_id}")
        identity = await self._create_identity(email, command)
        if identity.is_err():
            logger.warning(
                f"redeem identity creation failed invitation={invitation_id} "
                f"code={identity.error.code}"
            )
            return identity
        identity_id = identity.value.identity_id

        # The grant keeps running if the caller goes away
        grant = asyncio.ensure_future(
            self._grant(invitation_id, tenant_id, role, identity_id, email, command)
        )
        granted = await run_bounded("grant_membership", asyncio.shield(grant), timeout)
        if granted.is_err():
            return granted

        response = granted.value
        response.access_token = await self._sign_in(email, command.password)
        logger.info(
            f"redeem completed invitation={invitation_id} member={identity_id} "
            f"tenant={tenant_id}"
        )
        return Return.ok(response)

    async def _check_invitation(self, credential: str, email: str) -> Result[tuple]:
        async with self.uow:
            validated = await self.validator.validate(credential)
            if validated.is_err():
                if validated.error.code == ErrorCode.already_used.value:
                    granted = await self._granted_to(credential, email)
                    if granted is not None:
                        return Return.ok(granted)
                return validated
            invitation = validated.value

            if invitation.bound_email and invitation.bound_email.lower() != email:
                return Return.err(
                    error(
                        ErrorCode.email_mismatch,
                        "This invite code is for a different email address",
                    )
                )

            existing = await self.uow.members.get_by_email(email)
            if existing is not None and existing.business_id is not None:
                return Return.err(
                    error(
                        ErrorCode.already_registered,
                        "An account with this email already exists",
                    )
                )

            # Plain values: loaded instances expire when this block rolls back
            return Return.ok((invitation.id, invitation.business_id, invitation.role, None))

    async def _granted_to(self, credential: str, email: str) -> Optional[tuple]:
        """Consumed invitation whose grant went to the member holding this email"""
        found = await self.store.find_by_credential(normalize_credential(credential))
        if found.is_err():
            return None
        invitation = found.value

        member = await self.uow.members.get_by_email(email)
        if (
            member is None
            or invitation.consumed_by != member.id
            or member.business_id != invitation.business_id
        ):
            return None
        return (invitation.id, invitation.business_id, invitation.role, member.id)

    async def _confirm_existing_grant(
        self,
        invitation_id: UUID,
        tenant_id: UUID,
        role: MemberRole,
        member_id: UUID,
        email: str,
        password: str,
    ) -> Result[RedemptionResponse]:
        """
        Answer a retry whose earlier attempt was granted after the caller
        stopped waiting. The password proves the retry comes from the member.
        """
        signed_in = await run_bounded(
            "identity_sign_in",
            self.identity_provider.sign_in(email, password),
            self.settings.remote_call_timeout_seconds,
        )
        if signed_in.is_err() and signed_in.error.code == ErrorCode.transient_error.value:
            return signed_in
        if signed_in.is_err() or signed_in.value.identity_id != member_id:
            return Return.err(
                error(ErrorCode.already_used, "This invite code has already been used")
            )

        logger.info(
            f"redeem repeated for granted invitation={invitation_id} member={member_id}"
        )
        return Return.ok(
            RedemptionResponse(
                member_id=str(member_id),
                tenant_id=str(tenant_id),
                role=role.value,
                consumption_recorded=True,
                access_token=signed_in.value.access_token,
            )
        )

    async def _create_identity(
        self, email: str, command: RedemptionCommand
    ) -> Result[IdentityInfo]:
        timeout = self.settings.remote_call_timeout_seconds
        signed_up = await run_bounded(
            "identity_sign_up",
            self.identity_provider.sign_up(
                email,
                command.password,
                {"first_name": command.first_name, "last_name": command.last_name},
            ),
            timeout,
        )
        if signed_up.is_ok() or signed_up.error.details.get("reason") != EMAIL_TAKEN:
            return signed_up

        # Orphaned identity from an earlier attempt: prove ownership
        recovered = await run_bounded(
            "identity_sign_in",
            self.identity_provider.sign_in(email, command.password),
            timeout,
        )
        if recovered.is_err():
            if recovered.error.code == ErrorCode.transient_error.value:
                return recovered
            return signed_up

        logger.info(f"redeem reusing existing identity {recovered.value.identity_id}")
        return Return.ok(
            IdentityInfo(
                identity_id=recovered.value.identity_id, email=recovered.value.email
            )
        )

    async def _grant(
        self,
        invitation_id: UUID,
        tenant_id: UUID,
        role: MemberRole,
        identity_id: UUID,
        email: str,
        command: RedemptionCommand,
    ) -> Result[RedemptionResponse]:
        async with self.uow:
            logger.info(f"redeem step=upsert_member member={identity_id}")
            upserted = await self._upsert_member_or_fail(
                identity_id, email, tenant_id, role, command
            )
            if upserted.is_err():
                return upserted

            logger.info(f"redeem step=mark_consumed invitation={invitation_id}")
            try:
                consumed = await self.store.mark_consumed(invitation_id, identity_id)
            except SQLAlchemyError as exc:
                if is_transient(exc):
                    # Lock or connection loss: the row may be held by a
                    # concurrent redeemer, so nothing is committed
                    raise
                logger.warning(
                    f"Failed to mark invitation {invitation_id} as used (non-critical): "
                    f"{type(exc).__name__}: {exc}"
                )
                return await self._grant_without_consumption(
                    invitation_id, tenant_id, role, identity_id, email, command
                )

            if consumed.is_err():
                # A concurrent redemption consumed it first; leaving the
                # block rolls this membership back
                logger.warning(
                    f"redeem lost consumption race invitation={invitation_id} "
                    f"member={identity_id}"
                )
                return consumed

            await self._audit(invitation_id, tenant_id, role, identity_id, True)
            await self.uow.commit()

        return Return.ok(
            RedemptionResponse(
                member_id=str(identity_id),
                tenant_id=str(tenant_id),
                role=role.value,
                consumption_recorded=True,
            )
        )

    async def _grant_without_consumption(
        self,
        invitation_id: UUID,
        tenant_id: UUID,
        role: MemberRole,
        identity_id: UUID,
        email: str,
        command: RedemptionCommand,
    ) -> Result[RedemptionResponse]:
        """Commit the membership alone; the invitation keeps showing as pending"""
        await self.uow.rollback()

        upserted = await self._upsert_member_or_fail(
            identity_id, email, tenant_id, role, command
        )
        if upserted.is_err():
            return upserted

        await self._audit(invitation_id, tenant_id, role, identity_id, False)
        await self.uow.commit()

        return Return.ok(
            RedemptionResponse(
                member_id=str(identity_id),
                tenant_id=str(tenant_id),
                role=role.value,
                consumption_recorded=False,
            )
        )

    async def _upsert_member_or_fail(
        self,
        identity_id: UUID,
        email: str,
        tenant_id: UUID,
        role: MemberRole,
        command: RedemptionCommand,
    ) -> Result[Member]:
        try:
            return await self._upsert_member(identity_id, email, tenant_id, role, command)
        except SQLAlchemyError as exc:
            if is_transient(exc):
                raise
            logger.error(
                f"Profile creation failed for identity {identity_id}: "
                f"{type(exc).__name__}: {exc}"
            )
            return Return.err(
                error(
                    ErrorCode.profile_provisioning_failed,
                    "Your account was created but your profile could not be set up. "
                    "Please retry with the same invite code and email.",
                    identity_id=str(identity_id),
                )
            )

    async def _upsert_member(
        self,
        identity_id: UUID,
        email: str,
        tenant_id: UUID,
        role: MemberRole,
        command: RedemptionCommand,
    ) -> Result[Member]:
        """Create or repair the member row keyed by the identity id"""
        member = await self.uow.members.get_by_id(identity_id)

        if member is None:
            member = Member(
                id=identity_id,
                email=email,
                business_id=tenant_id,
                role=role,
                first_name=command.first_name,
                last_name=command.last_name,
                is_active=True,
            )
            return Return.ok(await self.uow.members.create(member))

        if member.business_id is not None:
            if member.business_id != tenant_id:
                # No tenant transfer through invitations
                return Return.err(
                    error(
                        ErrorCode.already_registered,
                        "An account with this email already exists",
                    )
                )
            return Return.ok(member)

        member.email = email
        member.business_id = tenant_id
        member.role = role
        member.first_name = command.first_name
        member.last_name = command.last_name
        member.is_active = True
        member.updated_at = self.clock.now()
        return Return.ok(await self.uow.members.update(member))

    async def _audit(
        self,
        invitation_id: UUID,
        tenant_id: UUID,
        role: MemberRole,
        identity_id: UUID,
        consumption_recorded: bool,
    ) -> None:
        audit = AuditEvent(
            business_id=tenant_id,
            member_id=identity_id,
            action="invitation_redeemed",
            event_metadata={
                "invitation_id": str(invitation_id),
                "role": role.value,
                "consumption_recorded": consumption_recorded,
            },
        )
        await self.uow.audit_events.create(audit)

    async def _sign_in(self, email: str, password: str) -> Optional[str]:
        signed_in = await run_bounded(
            "identity_sign_in",
            self.identity_provider.sign_in(email, password),
            self.settings.remote_call_timeout_seconds,
        )
        if signed_in.is_err():
            logger.warning(f"Auto sign-in failed (non-critical): {signed_in.error.code}")
            return None
        return signed_in.value.access_token
