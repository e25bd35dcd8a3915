import asyncio
from dataclasses import replace
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from tenant_access.app.services.identity_provider import AuthSession, IdentityInfo
from tenant_access.app.use_cases.invitations import (
    RedeemInvitationUseCase,
    RedemptionCommand,
)
from tenant_access.domain.entities import Invitation, Member, MemberRole
from tenant_access.libs.result import Error, Return


def email_taken():
    return Return.err(Error("AUTH_ERROR", "User already registered", {"reason": "email_taken"}))


@pytest.fixture
def invitation(clock):
    return Invitation(
        id=uuid4(),
        business_id=uuid4(),
        credential="ABCD1234",
        role=MemberRole.manager,
        created_at=clock.now() - timedelta(days=1),
        expires_at=clock.now() + timedelta(days=6),
    )


@pytest.fixture
def identity_provider():
    """Identity provider that remembers identities by email"""
    provider = MagicMock()
    identities = {}

    async def sign_up(email, password, metadata=None):
        if email in identities:
            return email_taken()
        identities[email] = (uuid4(), password)
        return Return.ok(IdentityInfo(identity_id=identities[email][0], email=email))

    async def sign_in(email, password):
        if email not in identities or identities[email][1] != password:
            return Return.err(
                Error("AUTH_ERROR", "Invalid email or password", {"reason": "invalid_credentials"})
            )
        return Return.ok(
            AuthSession(
                identity_id=identities[email][0],
                email=email,
                access_token="access-token",
                expires_at=datetime(2030, 1, 1),
            )
        )

    provider.sign_up = AsyncMock(side_effect=sign_up)
    provider.sign_in = AsyncMock(side_effect=sign_in)
    provider.identities = identities
    return provider


def command(email="nurse@clinic.com"):
    return RedemptionCommand(
        email=email, password="SecurePass123!", first_name="Ann", last_name="Lee"
    )


@pytest.mark.asyncio
async def test_successful_redemption(mock_uow, identity_provider, clock, settings, invitation):
    """Validate, create identity, create member, consume invitation"""
    # Arrange
    mock_uow.invitations.get_by_credential.return_value = invitation

    # Act
    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("abcd-1234", command())

    # Assert
    assert result.is_ok()
    response = result.value
    identity_id, _ = identity_provider.identities["nurse@clinic.com"]
    assert response.member_id == str(identity_id)
    assert response.tenant_id == str(invitation.business_id)
    assert response.role == "manager"
    assert response.consumption_recorded is True
    assert response.access_token == "access-token"

    member = mock_uow.members.create.call_args[0][0]
    assert member.id == identity_id
    assert member.business_id == invitation.business_id
    assert member.role == MemberRole.manager
    assert member.email == "nurse@clinic.com"

    mock_uow.invitations.mark_consumed.assert_awaited_once_with(
        invitation.id, identity_id, clock.now()
    )
    audit_event = mock_uow.audit_events.create.call_args[0][0]
    assert audit_event.action == "invitation_redeemed"
    assert audit_event.event_metadata["consumption_recorded"] is True
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_bound_email_matches_case_insensitively(
    mock_uow, identity_provider, clock, settings, invitation
):
    invitation.bound_email = "a@x.com"
    mock_uow.invitations.get_by_credential.return_value = invitation

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command("A@X.com"))

    assert result.is_ok()
    assert "a@x.com" in identity_provider.identities


@pytest.mark.asyncio
async def test_bound_email_mismatch_has_no_side_effects(
    mock_uow, identity_provider, clock, settings, invitation
):
    invitation.bound_email = "a@x.com"
    mock_uow.invitations.get_by_credential.return_value = invitation

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command("b@x.com"))

    assert result.is_err()
    assert result.error.code == "EMAIL_MISMATCH"
    identity_provider.sign_up.assert_not_called()
    mock_uow.members.create.assert_not_called()
    mock_uow.invitations.mark_consumed.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "credential,code",
    [("bad", "MALFORMED_CREDENTIAL"), ("ZZZZ9999", "NOT_FOUND")],
)
async def test_invalid_credentials_stop_before_identity(
    mock_uow, identity_provider, clock, settings, credential, code
):
    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute(credential, command())

    assert result.error.code == code
    identity_provider.sign_up.assert_not_called()


@pytest.mark.asyncio
async def test_used_invitation(mock_uow, identity_provider, clock, settings, invitation):
    invitation.consumed_at = clock.now() - timedelta(hours=1)
    mock_uow.invitations.get_by_credential.return_value = invitation

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "ALREADY_USED"
    identity_provider.sign_up.assert_not_called()


@pytest.mark.asyncio
async def test_email_already_member(mock_uow, identity_provider, clock, settings, invitation):
    mock_uow.invitations.get_by_credential.return_value = invitation
    mock_uow.members.get_by_email.return_value = Member(
        id=uuid4(), email="nurse@clinic.com", business_id=uuid4(), role=MemberRole.staff
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "ALREADY_REGISTERED"
    identity_provider.sign_up.assert_not_called()


@pytest.mark.asyncio
async def test_identity_rejection_aborts(mock_uow, identity_provider, clock, settings, invitation):
    mock_uow.invitations.get_by_credential.return_value = invitation
    identity_provider.sign_up = AsyncMock(
        return_value=Return.err(
            Error("AUTH_ERROR", "Password too weak", {"reason": "weak_password"})
        )
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "AUTH_ERROR"
    mock_uow.members.create.assert_not_called()
    mock_uow.invitations.mark_consumed.assert_not_called()


@pytest.mark.asyncio
async def test_identity_timeout_is_transient(
    mock_uow, identity_provider, clock, settings, invitation
):
    mock_uow.invitations.get_by_credential.return_value = invitation

    async def hang(*args, **kwargs):
        await asyncio.sleep(5)

    identity_provider.sign_up = AsyncMock(side_effect=hang)
    settings = replace(settings, remote_call_timeout_seconds=0.05)

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "TRANSIENT_ERROR"
    assert result.error.retryable
    mock_uow.members.create.assert_not_called()


@pytest.mark.asyncio
async def test_profile_failure_then_retry_recovers_identity(
    mock_uow, identity_provider, clock, settings, invitation
):
    """A failed member insert leaves an orphaned identity that a retry repairs"""
    mock_uow.invitations.get_by_credential.return_value = invitation
    mock_uow.members.create = AsyncMock(
        side_effect=[IntegrityError("insert", {}, Exception("boom"))]
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    first = await use_case.execute("ABCD1234", command())

    assert first.error.code == "PROFILE_PROVISIONING_FAILED"
    assert first.error.retryable
    identity_id, _ = identity_provider.identities["nurse@clinic.com"]
    assert first.error.details["identity_id"] == str(identity_id)
    mock_uow.invitations.mark_consumed.assert_not_called()

    created = []
    mock_uow.members.create = AsyncMock(side_effect=lambda m: created.append(m) or m)
    second = await use_case.execute("ABCD1234", command())

    assert second.is_ok()
    assert second.value.member_id == str(identity_id)
    assert created[0].id == identity_id
    assert identity_provider.sign_up.await_count == 2
    mock_uow.invitations.mark_consumed.assert_awaited_once()


@pytest.mark.asyncio
async def test_retry_with_wrong_password_cannot_claim_identity(
    mock_uow, identity_provider, clock, settings, invitation
):
    mock_uow.invitations.get_by_credential.return_value = invitation
    identity_provider.identities["nurse@clinic.com"] = (uuid4(), "someone-elses-password")

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "AUTH_ERROR"
    assert result.error.details["reason"] == "email_taken"
    mock_uow.members.create.assert_not_called()


@pytest.mark.asyncio
async def test_bookkeeping_failure_keeps_membership(
    mock_uow, identity_provider, clock, settings, invitation
):
    mock_uow.invitations.get_by_credential.return_value = invitation
    mock_uow.invitations.mark_consumed = AsyncMock(side_effect=SQLAlchemyError("disk full"))

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.is_ok()
    assert result.value.consumption_recorded is False
    mock_uow.rollback.assert_awaited_once()
    assert mock_uow.members.create.await_count == 2
    audit_event = mock_uow.audit_events.create.call_args[0][0]
    assert audit_event.event_metadata["consumption_recorded"] is False
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_auto_sign_in_failure_is_not_fatal(
    mock_uow, identity_provider, clock, settings, invitation
):
    mock_uow.invitations.get_by_credential.return_value = invitation
    identity_provider.sign_in = AsyncMock(
        return_value=Return.err(Error("AUTH_ERROR", "Rate limited", {"reason": "rate_limited"}))
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.is_ok()
    assert result.value.access_token is None


@pytest.mark.asyncio
async def test_existing_member_of_other_business_is_not_transferred(
    mock_uow, identity_provider, clock, settings, invitation
):
    """Identity already linked to a member of another business"""
    mock_uow.invitations.get_by_credential.return_value = invitation
    identity_provider.identities["nurse@clinic.com"] = (uuid4(), "SecurePass123!")
    mock_uow.members.get_by_id.return_value = Member(
        id=identity_provider.identities["nurse@clinic.com"][0],
        email="old@clinic.com",
        business_id=uuid4(),
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "ALREADY_REGISTERED"
    mock_uow.invitations.mark_consumed.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_redemptions_grant_once(
    uow_factory, identity_provider, clock, settings, invitation
):
    """Two recipients race for one invitation: exactly one becomes a member"""
    consumed_by = []

    async def mark_consumed(invitation_id, consumer_id, consumed_at):
        # Atomic compare-and-set on consumed_at
        if consumed_by:
            return False
        consumed_by.append(consumer_id)
        return True

    uows = []
    for _ in range(2):
        uow = uow_factory()
        uow.invitations.get_by_credential.return_value = invitation
        uow.invitations.mark_consumed = AsyncMock(side_effect=mark_consumed)
        uows.append(uow)

    results = await asyncio.gather(
        RedeemInvitationUseCase(uows[0], identity_provider, clock, settings).execute(
            "ABCD1234", command("first@clinic.com")
        ),
        RedeemInvitationUseCase(uows[1], identity_provider, clock, settings).execute(
            "ABCD1234", command("second@clinic.com")
        ),
    )

    winners = [r for r in results if r.is_ok()]
    losers = [r for r in results if r.is_err()]
    assert len(winners) == 1
    assert len(losers) == 1
    assert losers[0].error.code == "ALREADY_USED"
    assert str(consumed_by[0]) == winners[0].value.member_id
    assert sum(uow.commit.await_count for uow in uows) == 1


@pytest.mark.asyncio
async def test_lock_while_consuming_commits_nothing(
    mock_uow, identity_provider, clock, settings, invitation
):
    mock_uow.invitations.get_by_credential.return_value = invitation
    mock_uow.invitations.mark_consumed = AsyncMock(
        side_effect=OperationalError("UPDATE invitations", {}, Exception("database is locked"))
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.is_err()
    assert result.error.code == "TRANSIENT_ERROR"
    assert result.error.retryable
    mock_uow.audit_events.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_lock_behind_concurrent_redeemer_grants_once(
    uow_factory, identity_provider, clock, settings, invitation
):
    """The second redeemer hits the row lock held by the first"""
    winner_uow, blocked_uow = uow_factory(), uow_factory()
    for uow in (winner_uow, blocked_uow):
        uow.invitations.get_by_credential.return_value = invitation
    blocked_uow.invitations.mark_consumed = AsyncMock(
        side_effect=OperationalError("UPDATE invitations", {}, Exception("lock timeout"))
    )

    won = await RedeemInvitationUseCase(
        winner_uow, identity_provider, clock, settings
    ).execute("ABCD1234", command("first@clinic.com"))
    blocked = await RedeemInvitationUseCase(
        blocked_uow, identity_provider, clock, settings
    ).execute("ABCD1234", command("second@clinic.com"))

    assert won.is_ok()
    assert blocked.error.code == "TRANSIENT_ERROR"
    winner_uow.commit.assert_awaited_once()
    blocked_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_grant_finishes_after_caller_timed_out(
    mock_uow, identity_provider, clock, settings, invitation
):
    mock_uow.invitations.get_by_credential.return_value = invitation

    async def slow_create(member):
        await asyncio.sleep(0.2)
        return member

    mock_uow.members.create = AsyncMock(side_effect=slow_create)
    settings = replace(settings, remote_call_timeout_seconds=0.05)

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "TRANSIENT_ERROR"

    await asyncio.sleep(0.5)
    mock_uow.invitations.mark_consumed.assert_awaited_once()
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_retry_after_late_grant_returns_existing_membership(
    mock_uow, identity_provider, clock, settings, invitation
):
    """Invitation already consumed by this recipient's member row"""
    identity_id = uuid4()
    identity_provider.identities["nurse@clinic.com"] = (identity_id, "SecurePass123!")
    invitation.consumed_at = clock.now()
    invitation.consumed_by = identity_id
    mock_uow.invitations.get_by_credential.return_value = invitation
    mock_uow.members.get_by_email.return_value = Member(
        id=identity_id,
        email="nurse@clinic.com",
        business_id=invitation.business_id,
        role=MemberRole.manager,
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.is_ok()
    assert result.value.member_id == str(identity_id)
    assert result.value.tenant_id == str(invitation.business_id)
    assert result.value.role == "manager"
    assert result.value.access_token == "access-token"
    identity_provider.sign_up.assert_not_called()
    mock_uow.members.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_retry_after_late_grant_requires_the_password(
    mock_uow, identity_provider, clock, settings, invitation
):
    identity_id = uuid4()
    identity_provider.identities["nurse@clinic.com"] = (identity_id, "someone-elses-password")
    invitation.consumed_at = clock.now()
    invitation.consumed_by = identity_id
    mock_uow.invitations.get_by_credential.return_value = invitation
    mock_uow.members.get_by_email.return_value = Member(
        id=identity_id, email="nurse@clinic.com", business_id=invitation.business_id
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "ALREADY_USED"


@pytest.mark.asyncio
async def test_invitation_used_by_someone_else(
    mock_uow, identity_provider, clock, settings, invitation
):
    invitation.consumed_at = clock.now()
    invitation.consumed_by = uuid4()
    mock_uow.invitations.get_by_credential.return_value = invitation
    mock_uow.members.get_by_email.return_value = Member(
        id=uuid4(), email="nurse@clinic.com", business_id=invitation.business_id
    )

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "ALREADY_USED"
    identity_provider.sign_in.assert_not_called()


@pytest.mark.asyncio
async def test_recovery_sign_in_timeout_stays_retryable(
    mock_uow, identity_provider, clock, settings, invitation
):
    mock_uow.invitations.get_by_credential.return_value = invitation
    identity_provider.identities["nurse@clinic.com"] = (uuid4(), "SecurePass123!")

    async def hang(*args, **kwargs):
        await asyncio.sleep(5)

    identity_provider.sign_in = AsyncMock(side_effect=hang)
    settings = replace(settings, remote_call_timeout_seconds=0.05)

    use_case = RedeemInvitationUseCase(mock_uow, identity_provider, clock, settings)
    result = await use_case.execute("ABCD1234", command())

    assert result.error.code == "TRANSIENT_ERROR"
    assert result.error.details["operation"] == "identity_sign_in"
    mock_uow.members.create.assert_not_called()
