from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from tenant_access.domain.entities import Invitation


class IInvitationRepository(ABC):
    """Invitation repository interface - application layer"""

    @abstractmethod
    async def get_by_credential(self, credential: str) -> Optional[Invitation]:
        """Get invitation by its exact credential"""
        pass

    @abstractmethod
    async def credential_exists(self, credential: str) -> bool:
        """Check whether any invitation, pending or consumed, uses the credential"""
        pass

    @abstractmethod
    async def get_pending_by_business_and_email(
        self, business_id: UUID, email: str, now: datetime
    ) -> Optional[Invitation]:
        """Get an unconsumed, unexpired invitation bound to email in a business"""
        pass

    @abstractmethod
    async def get_by_business_id(self, business_id: UUID) -> List[Invitation]:
        """Get all invitations of a business, newest first"""
        pass

    @abstractmethod
    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation"""
        pass

    @abstractmethod
    async def mark_consumed(
        self, invitation_id: UUID, consumer_id: UUID, consumed_at: datetime
    ) -> bool:
        """
        Atomically mark an invitation consumed.

        Returns:
            True if this call consumed it, False if it was already consumed
            (or does not exist)
        """
        pass

    @abstractmethod
    async def delete_for_business(self, invitation_id: UUID, business_id: UUID) -> bool:
        """
        Delete an invitation only if it belongs to the business.

        Returns:
            True if a row was deleted
        """
        pass
