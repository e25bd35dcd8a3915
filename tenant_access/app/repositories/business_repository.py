from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from tenant_access.domain.entities import Business


class IBusinessRepository(ABC):
    """Business repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, business_id: UUID) -> Optional[Business]:
        """Get business by ID"""
        pass

    @abstractmethod
    async def create(self, business: Business) -> Business:
        """Create a new business"""
        pass
