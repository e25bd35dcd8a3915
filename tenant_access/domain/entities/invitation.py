"""
Invitation Entity

Pending, time-boxed grant of membership in a business.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from tenant_access.domain.base import utcnow

from .enums import InvitationKind, InvitationStatus, MemberRole


class Invitation(SQLModel, table=True):
    """
    Invitation entity - grants membership at a role, redeemable once.

    Business Rules:
    - Created by an owner or manager of the business
    - role is manager or staff, never owner
    - credential is unique (short code or token)
    - Usable iff consumed_at is null and now < expires_at
    - Token invitations are always bound to one email
    - Immutable once consumed
    """

    __tablename__ = "invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    business_id: UUID = Field(foreign_key="businesses.id", nullable=False, index=True)
    kind: InvitationKind = Field(default=InvitationKind.short_code)
    credential: str = Field(unique=True, index=True, max_length=255)

    role: MemberRole = Field(nullable=False)
    bound_email: Optional[str] = Field(default=None, max_length=255)

    created_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    consumed_by: Optional[UUID] = Field(default=None, foreign_key="users.id")

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    consumed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invitation_business_created", "business_id", "created_at"),
        Index("idx_invitation_business_email", "business_id", "bound_email"),
    )

    def status_at(self, now: datetime) -> InvitationStatus:
        if self.consumed_at is not None:
            return InvitationStatus.consumed
        if now >= self.expires_at:
            return InvitationStatus.expired
        return InvitationStatus.pending

    def is_usable_at(self, now: datetime) -> bool:
        return self.status_at(now) == InvitationStatus.pending
