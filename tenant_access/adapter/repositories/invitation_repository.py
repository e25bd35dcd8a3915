from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_access.app.repositories.invitation_repository import IInvitationRepository
from tenant_access.domain.entities import Invitation


class InvitationRepository(IInvitationRepository):
    """Invitation repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_credential(self, credential: str) -> Optional[Invitation]:
        """Get invitation by its exact credential"""
        stmt = select(Invitation).where(Invitation.credential == credential)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def credential_exists(self, credential: str) -> bool:
        """Check whether any invitation uses the credential"""
        stmt = select(Invitation.id).where(Invitation.credential == credential).limit(1)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def get_pending_by_business_and_email(
        self, business_id: UUID, email: str, now: datetime
    ) -> Optional[Invitation]:
        """Get an unconsumed, unexpired invitation bound to email in a business"""
        stmt = (
            select(Invitation)
            .where(
                Invitation.business_id == business_id,
                Invitation.bound_email == email,
                Invitation.consumed_at.is_(None),
                Invitation.expires_at > now,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_business_id(self, business_id: UUID) -> List[Invitation]:
        """Get all invitations of a business, newest first"""
        stmt = (
            select(Invitation)
            .where(Invitation.business_id == business_id)
            .order_by(Invitation.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation"""
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def mark_consumed(
        self, invitation_id: UUID, consumer_id: UUID, consumed_at: datetime
    ) -> bool:
        """Conditional update: only an unconsumed row is touched"""
        stmt = (
            update(Invitation)
            .where(Invitation.id == invitation_id, Invitation.consumed_at.is_(None))
            .values(consumed_at=consumed_at, consumed_by=consumer_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def delete_for_business(self, invitation_id: UUID, business_id: UUID) -> bool:
        """Tenant-scoped delete: the business id is part of the predicate"""
        stmt = (
            delete(Invitation)
            .where(Invitation.id == invitation_id, Invitation.business_id == business_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
