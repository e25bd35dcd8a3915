from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_access.app.repositories.member_repository import IMemberRepository
from tenant_access.domain.entities import Member


class MemberRepository(IMemberRepository):
    """Member repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, member_id: UUID) -> Optional[Member]:
        """Get member by ID"""
        stmt = select(Member).where(Member.id == member_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Member]:
        """Get member by email, case-insensitively"""
        stmt = select(Member).where(func.lower(Member.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_business_id(self, business_id: UUID) -> List[Member]:
        """Get all members of a business, newest first"""
        stmt = (
            select(Member)
            .where(Member.business_id == business_id)
            .order_by(Member.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, member: Member) -> Member:
        """Create a new member"""
        self.session.add(member)
        await self.session.flush()
        await self.session.refresh(member)
        return member

    async def update(self, member: Member) -> Member:
        """Update existing member"""
        self.session.add(member)
        await self.session.flush()
        await self.session.refresh(member)
        return member
