from abc import ABC, abstractmethod

from tenant_access.app.repositories.audit_event_repository import IAuditEventRepository
from tenant_access.app.repositories.business_repository import IBusinessRepository
from tenant_access.app.repositories.invitation_repository import IInvitationRepository
from tenant_access.app.repositories.member_repository import IMemberRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    businesses: IBusinessRepository
    members: IMemberRepository
    invitations: IInvitationRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
