"""
Invitation Validator

Decides whether a presented credential is currently acceptable. Read-only:
it can be called any number of times without consuming the invitation.
The email binding is checked at redemption, when the email is known.
"""

from tenant_access.app.services.clock import Clock
from tenant_access.app.services.invitation_store import InvitationStore
from tenant_access.domain.credentials import is_valid_credential_format
from tenant_access.domain.entities import Invitation
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.domain.invite_links import normalize_credential
from tenant_access.libs.result import Result, Return


class InvitationValidator:
    def __init__(self, store: InvitationStore, clock: Clock):
        self.store = store
        self.clock = clock

    async def validate(self, credential: str) -> Result[Invitation]:
        """
        Validate a credential.

        Checks run in order and stop at the first failure:
        format, existence, prior use, expiry.

        Returns:
            Result with the pending Invitation, or MALFORMED_CREDENTIAL,
            NOT_FOUND, ALREADY_USED, EXPIRED
        """
        credential = normalize_credential(credential)
        if not is_valid_credential_format(credential):
            return Return.err(
                error(
                    ErrorCode.malformed_credential,
                    "Invalid invite code format. Codes must be 8 characters "
                    "(4 letters + 4 numbers)",
                )
            )

        found = await self.store.find_by_credential(credential)
        if found.is_err():
            return found
        invitation = found.value

        if invitation.consumed_at is not None:
            return Return.err(
                error(ErrorCode.already_used, "This invite code has already been used")
            )

        if self.clock.now() >= invitation.expires_at:
            return Return.err(error(ErrorCode.expired, "This invite code has expired"))

        return Return.ok(invitation)
