from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from tenant_access.app.services.settings import InvitationSettings

NOW = datetime(2026, 3, 1, 12, 0, 0)


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.current = now

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def settings():
    return InvitationSettings(public_base_url="https://app.example.com")


def build_mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.businesses = MagicMock()
    uow.businesses.get_by_id = AsyncMock(return_value=None)
    uow.businesses.create = AsyncMock(side_effect=lambda business: business)

    uow.members = MagicMock()
    uow.members.get_by_id = AsyncMock(return_value=None)
    uow.members.get_by_email = AsyncMock(return_value=None)
    uow.members.get_by_business_id = AsyncMock(return_value=[])
    uow.members.create = AsyncMock(side_effect=lambda member: member)
    uow.members.update = AsyncMock(side_effect=lambda member: member)

    uow.invitations = MagicMock()
    uow.invitations.get_by_credential = AsyncMock(return_value=None)
    uow.invitations.credential_exists = AsyncMock(return_value=False)
    uow.invitations.get_pending_by_business_and_email = AsyncMock(return_value=None)
    uow.invitations.get_by_business_id = AsyncMock(return_value=[])
    uow.invitations.create = AsyncMock(side_effect=lambda invitation: invitation)
    uow.invitations.mark_consumed = AsyncMock(return_value=True)
    uow.invitations.delete_for_business = AsyncMock(return_value=True)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    return uow


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    return build_mock_uow()


@pytest.fixture
def uow_factory():
    return build_mock_uow
