from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_access.adapter.repositories.audit_event_repository import AuditEventRepository
from tenant_access.adapter.repositories.business_repository import BusinessRepository
from tenant_access.adapter.repositories.invitation_repository import InvitationRepository
from tenant_access.adapter.repositories.member_repository import MemberRepository
from tenant_access.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.businesses = BusinessRepository(self.session)
        self.members = MemberRepository(self.session)
        self.invitations = InvitationRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
