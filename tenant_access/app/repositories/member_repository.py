from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from tenant_access.domain.entities import Member


class IMemberRepository(ABC):
    """Member repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, member_id: UUID) -> Optional[Member]:
        """Get member by ID (the identity provider subject id)"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Member]:
        """Get member by email, case-insensitively"""
        pass

    @abstractmethod
    async def get_by_business_id(self, business_id: UUID) -> List[Member]:
        """Get all members of a business, newest first"""
        pass

    @abstractmethod
    async def create(self, member: Member) -> Member:
        """Create a new member"""
        pass

    @abstractmethod
    async def update(self, member: Member) -> Member:
        """Update existing member"""
        pass
